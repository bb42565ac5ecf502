from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable

from openai import AsyncOpenAI

from ..config import Settings
from ..media.base import DecodeHandle
from ..media.ffmpeg_handle import FFmpegDecodeHandle
from .components import DocumentSynthesizer, SourceAcquirer, is_ai_error
from .errors import EmptyResultError, GenerationError, InvalidInputError, RunCancelledError
from .models import DocumentResult, SampleResult, UrlSource, VideoSource
from .sampler import FrameSampler
from ..utils.file import ensure_dir


logger = logging.getLogger(__name__)

EMPTY_RESULT_MESSAGE = "Could not extract any frames from the video. Please try a different video file."


class PipelineRunner:
    def __init__(
        self,
        acquirer: SourceAcquirer,
        sampler: FrameSampler,
        synthesizer: DocumentSynthesizer,
        handle_factory: Callable[[Path], DecodeHandle] = FFmpegDecodeHandle,
    ) -> None:
        self.acquirer = acquirer
        self.sampler = sampler
        self.synthesizer = synthesizer
        self.handle_factory = handle_factory

    @staticmethod
    def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RunCancelledError("Generation was cancelled.")

    async def _sample(
        self,
        source: VideoSource,
        tmp_root: Path,
        cancel_event: asyncio.Event | None,
        on_progress=None,
    ) -> tuple[str, SampleResult]:
        acquired = await self.acquirer.acquire(source, tmp_root)
        try:
            self._check_cancelled(cancel_event)
            if on_progress:
                on_progress(step="frames", message="Extracting key frames & metadata...")
            async with self.handle_factory(acquired.path) as handle:
                sample = await self.sampler.sample(handle)
        finally:
            acquired.release()
        return acquired.filename, sample

    async def run(
        self,
        source: VideoSource,
        transcript: str,
        language: str,
        tmp_root: Path,
        on_progress=None,
        cancel_event: asyncio.Event | None = None,
    ) -> DocumentResult:
        if not transcript.strip():
            raise InvalidInputError("Please provide a transcript.")
        ensure_dir(tmp_root)
        logger.info(
            "run source=%s language=%s transcript_chars=%d",
            type(source).__name__,
            language,
            len(transcript),
        )

        if isinstance(source, UrlSource) and on_progress:
            on_progress(step="fetch", message="Fetching video from URL...")
        self._check_cancelled(cancel_event)
        filename, sample = await self._sample(source, tmp_root, cancel_event, on_progress)

        if not sample.frames:
            logger.error("no frames extracted from %s", filename)
            raise EmptyResultError(EMPTY_RESULT_MESSAGE)

        self._check_cancelled(cancel_event)
        if on_progress:
            on_progress(step="generate", message="Generating document...")
        document = await self.synthesizer.synthesize(transcript, sample.frames, language)
        if is_ai_error(document):
            raise GenerationError(document)

        if on_progress:
            on_progress(step="done", message="Document ready")
        return DocumentResult(
            document=document,
            frames=sample.frames,
            metadata=sample.metadata,
            language=language,
            title=Path(filename).stem,
        )


class PipelineFactory:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def create(self, show_progress: bool = False) -> PipelineRunner:
        client = AsyncOpenAI(api_key=self.settings.api_key, base_url=self.settings.base_url)
        return PipelineRunner(
            acquirer=SourceAcquirer(timeout=self.settings.fetch_timeout, show_progress=show_progress),
            sampler=FrameSampler(
                frame_count=self.settings.frame_count,
                jpeg_quality=self.settings.jpeg_quality,
            ),
            synthesizer=DocumentSynthesizer(client=client, model=self.settings.llm_model),
        )
