from pathlib import Path
from types import SimpleNamespace

import pytest

from video2doc.media.base import DecodeHandle
from video2doc.pipeline.errors import LoadError
from video2doc.pipeline.models import AcquiredVideo, ExtractedFrame


class FakeDecodeHandle(DecodeHandle):
    name = "fake"

    def __init__(self, duration=100.0, size=(16, 8), fail_load=False, unready_seeks=()):
        self.duration = duration
        self.size = size
        self.fail_load = fail_load
        self.unready_seeks = set(unready_seeks)
        self.seeks: list[float] = []
        self.loaded = False
        self.close_calls = 0
        self._ready = False

    async def load(self) -> None:
        if self.fail_load:
            raise LoadError("Error loading video file. It might be corrupt or in an unsupported format.")
        self.loaded = True

    def get_duration(self) -> float:
        return self.duration

    def get_native_dimensions(self) -> tuple[int, int]:
        return self.size

    async def seek_to(self, seconds: float) -> bool:
        self.seeks.append(seconds)
        self._ready = len(self.seeks) not in self.unready_seeks
        return self._ready

    async def read_current_frame(self) -> bytes:
        assert self._ready
        width, height = self.size
        shade = (len(self.seeks) * 20) % 256
        return bytes([shade, 0, 255 - shade]) * (width * height)

    async def close(self) -> None:
        self.close_calls += 1


class FakeCompletions:
    def __init__(self, text="# Document", error=None):
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.text)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:
    def __init__(self, text="# Document", error=None):
        self.completions = FakeCompletions(text=text, error=error)
        self.chat = SimpleNamespace(completions=self.completions)


class FakeAcquirer:
    def __init__(self, path: Path, temporary: bool = True):
        self.path = path
        self.temporary = temporary
        self.acquired: list[AcquiredVideo] = []

    async def acquire(self, source, tmp_dir):
        video = AcquiredVideo(
            path=self.path,
            filename=self.path.name,
            mime_type="video/mp4",
            temporary=self.temporary,
        )
        self.acquired.append(video)
        return video


@pytest.fixture
def fake_handle_cls():
    return FakeDecodeHandle


@pytest.fixture
def fake_client_cls():
    return FakeClient


@pytest.fixture
def fake_acquirer_cls():
    return FakeAcquirer


@pytest.fixture
def sample_frames():
    return tuple(
        ExtractedFrame(id=f"frame-{k}", image=bytes([k]) * 4, timestamp=k * 1.5)
        for k in range(1, 4)
    )
