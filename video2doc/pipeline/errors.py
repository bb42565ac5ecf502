from __future__ import annotations


class Video2DocError(RuntimeError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(Video2DocError, ValueError):
    pass


class LoadError(Video2DocError):
    """The video bytes could not be decoded as a playable video."""


class FetchError(Video2DocError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResultError(Video2DocError):
    """Sampling finished but produced no frames."""


class GenerationError(Video2DocError):
    """The generation service failed or reported an error."""


class RunCancelledError(Video2DocError):
    pass
