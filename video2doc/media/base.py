from __future__ import annotations

from abc import ABC, abstractmethod


class DecodeHandle(ABC):
    """A decodable media handle exclusively owned by one sampling run.

    Implementations expose the video duration and native pixel size once
    ``load`` has completed, move the decode cursor with ``seek_to`` and hand
    back the frame under the cursor as packed RGB24 bytes. ``close`` must be
    safe to call more than once.
    """

    name: str = "base"

    @abstractmethod
    async def load(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_duration(self) -> float:
        raise NotImplementedError

    @abstractmethod
    def get_native_dimensions(self) -> tuple[int, int]:
        raise NotImplementedError

    @abstractmethod
    async def seek_to(self, seconds: float) -> bool:
        """Move the cursor and wait until the frame there is ready.

        Returns False when no frame could be decoded at that position.
        """
        raise NotImplementedError

    @abstractmethod
    async def read_current_frame(self) -> bytes:
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError

    async def __aenter__(self) -> "DecodeHandle":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
