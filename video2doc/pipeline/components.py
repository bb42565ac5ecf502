from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Sequence
from urllib.parse import urlparse

import requests
from openai import AsyncOpenAI
from tqdm import tqdm

from .errors import EmptyResultError, FetchError, InvalidInputError
from .models import AcquiredVideo, ExtractedFrame, FileSource, UrlSource, VideoSource
from ..utils.file import ensure_dir, filename_from_url, guess_mime_type, is_video_mime


logger = logging.getLogger(__name__)

AI_ERROR_PREFIX = "Error from AI:"
URL_ERROR_TEMPLATE = (
    "Could not load video from URL. This may be due to a network issue or the server "
    "refusing the request. Please try another URL or upload the file directly. Details: {detail}"
)

DOCUMENT_PROMPT = """\
You are an expert technical writer. Your task is to transform a video transcript into a formal markdown document. I will provide you with the transcript and a series of key frames extracted from the video.

**IMPORTANT: Generate the entire document in {language}.**

Instructions:
1. Read the entire transcript to understand the context and key topics.
2. Synthesize the information into a well-structured, formal document. Do not simply copy the transcript. Rephrase it in a professional tone. Use headings, bullet points, and bold text to organize the content.
3. Analyze the provided key frames. These are labeled as 'Frame 1', 'Frame 2', etc.
4. Identify frames that appear to be charts, graphs, presentation slides, or important diagrams.
5. Where relevant in the document, insert a reference to these key frames using markdown link syntax. For example: 'As shown in the slide ([See Frame 3](#frame-3)), the results indicate...'. Use the ID provided for each frame in the link (e.g., #frame-3).
6. Create a final section at the end of the document titled '## Key Visuals' and list all the provided frames with their corresponding links, for example:
   - [Frame 1](#frame-1)
   - [Frame 2](#frame-2)
   ...and so on for all provided frames.

Here is the transcript:
---
{transcript}
---

And here are the key frames from the video:
"""


def is_ai_error(document: str) -> bool:
    return document.startswith(AI_ERROR_PREFIX)


def build_prompt(transcript: str, language: str) -> str:
    return DOCUMENT_PROMPT.format(transcript=transcript, language=language)


def build_content_parts(
    transcript: str,
    frames: Sequence[ExtractedFrame],
    language: str,
) -> list[dict]:
    parts: list[dict] = [{"type": "text", "text": build_prompt(transcript, language)}]
    for index, frame in enumerate(frames, start=1):
        parts.append({"type": "text", "text": f"Frame {index} (id: {frame.id}):"})
        parts.append({"type": "image_url", "image_url": {"url": frame.data_url}})
    return parts


class SourceAcquirer:
    def __init__(self, timeout: float = 60.0, chunk_size: int = 8192, show_progress: bool = False) -> None:
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.show_progress = show_progress

    async def acquire(self, source: VideoSource, tmp_dir: Path) -> AcquiredVideo:
        if isinstance(source, FileSource):
            return self._from_file(source)
        if isinstance(source, UrlSource):
            return await asyncio.to_thread(self._from_url, source, tmp_dir)
        raise TypeError(f"Unsupported video source: {type(source).__name__}")

    def _from_file(self, source: FileSource) -> AcquiredVideo:
        path = Path(source.path)
        mime_type = source.mime_type or guess_mime_type(path)
        if not path.is_file() or not is_video_mime(mime_type):
            raise InvalidInputError("Please upload a valid video file.")
        return AcquiredVideo(
            path=path,
            filename=source.filename or path.name,
            mime_type=mime_type,
            temporary=False,
        )

    def _from_url(self, source: UrlSource, tmp_dir: Path) -> AcquiredVideo:
        parsed = urlparse(source.url.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidInputError("Please enter a valid URL.")

        filename = filename_from_url(source.url)
        ensure_dir(tmp_dir)
        video_path = tmp_dir / f"{uuid.uuid4().hex[:8]}_{filename}"
        logger.info("fetching %s", source.url)
        try:
            mime_type = self._download(source.url, video_path)
        except (FetchError, requests.RequestException, OSError) as exc:
            video_path.unlink(missing_ok=True)
            logger.error("fetch failed for %s: %s", source.url, exc)
            raise FetchError(
                URL_ERROR_TEMPLATE.format(detail=exc),
                status_code=getattr(exc, "status_code", None),
            ) from exc

        return AcquiredVideo(path=video_path, filename=filename, mime_type=mime_type, temporary=True)

    def _download(self, url: str, video_path: Path) -> str:
        response = requests.get(url, stream=True, timeout=self.timeout)
        try:
            if not response.ok:
                raise FetchError(
                    f"Failed to fetch video: {response.status_code} {response.reason}",
                    status_code=response.status_code,
                )
            mime_type = response.headers.get("content-type", "").split(";")[0].strip()
            if not is_video_mime(mime_type):
                raise FetchError(f"The fetched file is not a video. MIME type: {mime_type}")

            total = int(response.headers.get("content-length", 0) or 0)
            with open(video_path, "wb") as f, tqdm(
                total=total,
                unit="B",
                unit_scale=True,
                desc=f"Downloading {video_path.name}",
                disable=not self.show_progress,
            ) as progress:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        f.write(chunk)
                        progress.update(len(chunk))
        finally:
            response.close()
        return mime_type


class DocumentSynthesizer:
    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        self.client = client
        self.model = model

    async def synthesize(
        self,
        transcript: str,
        frames: Sequence[ExtractedFrame],
        language: str,
    ) -> str:
        """One request to the generation service.

        Service failures come back as text starting with ``AI_ERROR_PREFIX``
        instead of being raised.
        """
        if not frames:
            raise EmptyResultError("No frames to send to the generation service.")

        content = build_content_parts(transcript, frames, language)
        logger.info("requesting document model=%s frames=%d language=%s", self.model, len(frames), language)
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
            )
            text = response.choices[0].message.content or ""
        except Exception as exc:
            logger.error("generation request failed: %s", exc)
            return f"{AI_ERROR_PREFIX} {str(exc) or type(exc).__name__}"
        logger.info("document received chars=%d", len(text))
        return text.strip()
