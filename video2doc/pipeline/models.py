from __future__ import annotations

import base64
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class FileSource:
    path: Path
    mime_type: Optional[str] = None
    filename: Optional[str] = None


@dataclass(frozen=True)
class UrlSource:
    url: str


VideoSource = Union[FileSource, UrlSource]


@dataclass
class AcquiredVideo:
    path: Path
    filename: str
    mime_type: str
    temporary: bool = False
    _released: bool = field(default=False, repr=False)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self.temporary:
            self.path.unlink(missing_ok=True)


@dataclass(frozen=True)
class ExtractedFrame:
    id: str
    image: bytes
    timestamp: float = 0.0
    mime_type: str = "image/jpeg"

    @property
    def base64(self) -> str:
        return base64.b64encode(self.image).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


@dataclass(frozen=True)
class VideoMetadata:
    duration: str
    resolution: str


@dataclass(frozen=True)
class SampleResult:
    frames: tuple[ExtractedFrame, ...]
    metadata: VideoMetadata


@dataclass(frozen=True)
class DocumentResult:
    document: str
    frames: tuple[ExtractedFrame, ...]
    metadata: VideoMetadata
    language: str
    title: str = ""
