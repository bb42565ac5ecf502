"""Frame sampling: evenly spaced stills plus duration/resolution metadata."""
from __future__ import annotations

import io
import logging
import math
from numbers import Real

from PIL import Image

from ..media.base import DecodeHandle
from .models import ExtractedFrame, SampleResult, VideoMetadata


logger = logging.getLogger(__name__)

DEFAULT_FRAME_COUNT = 10
DEFAULT_JPEG_QUALITY = 80


def format_duration(seconds) -> str:
    if not isinstance(seconds, Real) or isinstance(seconds, bool):
        return "0s"
    if not math.isfinite(seconds) or seconds < 0:
        return "0s"
    minutes = math.floor(seconds / 60)
    remaining = math.floor(seconds % 60 + 0.5)
    # 59.5s and up round into the next minute instead of showing "60s"
    if remaining == 60:
        minutes += 1
        remaining = 0
    if minutes > 0:
        return f"{minutes}m {remaining}s"
    return f"{remaining}s"


def compute_sample_times(duration: float, count: int = DEFAULT_FRAME_COUNT) -> list[float]:
    """Targets at duration / (count + 1) * k, never at 0 or at the very end."""
    if duration is None or not math.isfinite(duration) or duration <= 0:
        return []
    interval = duration / (count + 1)
    times: list[float] = []
    for k in range(1, count + 1):
        target = interval * k
        if target > duration:
            break
        times.append(target)
    return times


def encode_frame(raw: bytes, width: int, height: int, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    image = Image.frombytes("RGB", (width, height), raw)
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


class FrameSampler:
    def __init__(self, frame_count: int = DEFAULT_FRAME_COUNT, jpeg_quality: int = DEFAULT_JPEG_QUALITY) -> None:
        self.frame_count = frame_count
        self.jpeg_quality = jpeg_quality

    async def sample(self, handle: DecodeHandle) -> SampleResult:
        """Load ``handle`` and pull up to ``frame_count`` stills from it.

        Raises LoadError (from the handle) when the video cannot be decoded.
        A seek that yields no frame is skipped; the ids of the frames that
        were produced stay dense (frame-1 .. frame-m).
        """
        await handle.load()
        duration = handle.get_duration()
        width, height = handle.get_native_dimensions()
        metadata = VideoMetadata(
            duration=format_duration(duration),
            resolution=f"{width}x{height}",
        )
        logger.info(
            "metadata duration=%s resolution=%s handle=%s",
            metadata.duration,
            metadata.resolution,
            handle.name,
        )

        frames: list[ExtractedFrame] = []
        times = compute_sample_times(duration, self.frame_count)
        for index, target in enumerate(times, start=1):
            logger.debug("sample %d/%d at %.3fs", index, len(times), target)
            if not await handle.seek_to(target):
                logger.warning("skipping sample %d at %.3fs: frame not ready", index, target)
                continue
            raw = await handle.read_current_frame()
            frames.append(
                ExtractedFrame(
                    id=f"frame-{len(frames) + 1}",
                    image=encode_frame(raw, width, height, self.jpeg_quality),
                    timestamp=target,
                )
            )

        logger.info("extracted %d of %d frames", len(frames), len(times))
        return SampleResult(frames=tuple(frames), metadata=metadata)
