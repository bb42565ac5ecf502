from __future__ import annotations

import asyncio
import logging
import math
from pathlib import Path

import ffmpeg

from .base import DecodeHandle
from ..pipeline.errors import LoadError
from ..utils.ffmpeg import probe_video, read_raw_frame


logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Error loading video file. It might be corrupt or in an unsupported format."


class FFmpegDecodeHandle(DecodeHandle):
    name = "ffmpeg"

    def __init__(self, video_path: Path) -> None:
        self.video_path = Path(video_path)
        self._duration = math.nan
        self._dimensions: tuple[int, int] | None = None
        self._current: bytes | None = None
        self._lock = asyncio.Lock()
        self._closed = False

    async def load(self) -> None:
        try:
            duration, width, height = await asyncio.to_thread(probe_video, self.video_path)
        except FileNotFoundError as exc:
            logger.error("cannot probe %s: %s", self.video_path, exc)
            raise LoadError(str(exc)) from exc
        except (ffmpeg.Error, ValueError) as exc:
            detail = exc.stderr.decode("utf-8", "ignore").strip() if isinstance(exc, ffmpeg.Error) and exc.stderr else str(exc)
            logger.error("probe failed for %s: %s", self.video_path, detail)
            raise LoadError(LOAD_ERROR_MESSAGE) from exc
        self._duration = duration
        self._dimensions = (width, height)
        logger.debug("loaded %s duration=%s size=%sx%s", self.video_path, duration, width, height)

    def get_duration(self) -> float:
        return self._duration

    def get_native_dimensions(self) -> tuple[int, int]:
        if self._dimensions is None:
            raise RuntimeError("Decode handle is not loaded")
        return self._dimensions

    async def seek_to(self, seconds: float) -> bool:
        width, height = self.get_native_dimensions()
        async with self._lock:
            self._current = None
            try:
                raw = await asyncio.to_thread(read_raw_frame, self.video_path, seconds, width, height)
            except ffmpeg.Error as exc:
                logger.warning("seek to %.3fs failed: %s", seconds, exc)
                return False
            if len(raw) < width * height * 3:
                logger.warning("no frame decoded at %.3fs", seconds)
                return False
            self._current = raw[: width * height * 3]
            return True

    async def read_current_frame(self) -> bytes:
        if self._current is None:
            raise RuntimeError("No frame is ready at the current position")
        return self._current

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._current = None
