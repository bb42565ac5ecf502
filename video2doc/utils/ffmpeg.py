from __future__ import annotations

from pathlib import Path
import math
import shutil
import ffmpeg


def _ensure_ffmpeg() -> None:
    if not shutil.which("ffmpeg"):
        raise FileNotFoundError(
            "ffmpeg not found in PATH. Install ffmpeg and ensure it is available in PATH."
        )


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def probe_video(video_path: Path) -> tuple[float, int, int]:
    """Return (duration seconds, width, height) for the first video stream."""
    _ensure_ffmpeg()
    probe = ffmpeg.probe(str(video_path))
    streams = probe.get("streams") or []
    video_streams = [s for s in streams if s.get("codec_type") == "video"]
    if not video_streams:
        raise ValueError("No video stream found")
    stream = video_streams[0]
    width = int(stream.get("width") or 0)
    height = int(stream.get("height") or 0)
    if width <= 0 or height <= 0:
        raise ValueError("Video stream has no pixel dimensions")

    duration = _to_float((probe.get("format") or {}).get("duration"))
    if math.isnan(duration):
        duration = _to_float(stream.get("duration"))
    return duration, width, height


def read_raw_frame(video_path: Path, seconds: float, width: int, height: int) -> bytes:
    """Decode the frame at ``seconds`` scaled to ``width``x``height`` as RGB24."""
    _ensure_ffmpeg()
    out, _ = (
        ffmpeg
        .input(str(video_path), ss=f"{seconds:.3f}")
        .output(
            "pipe:",
            vframes=1,
            format="rawvideo",
            pix_fmt="rgb24",
            s=f"{width}x{height}",
        )
        .run(capture_stdout=True, capture_stderr=True)
    )
    return out
