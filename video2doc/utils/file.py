import mimetypes
from pathlib import Path
from urllib.parse import unquote, urlparse


DEFAULT_URL_FILENAME = "video_from_url"


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def sanitize_filename(name: str) -> str:
    return "".join(ch if ch not in '\\/:*?"<>|' else "_" for ch in name).strip()


def filename_from_url(url: str) -> str:
    path = urlparse(url).path
    name = unquote(path[path.rfind("/") + 1:])
    return sanitize_filename(name) or DEFAULT_URL_FILENAME


def guess_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or ""


def is_video_mime(mime_type: str | None) -> bool:
    return bool(mime_type) and mime_type.lower().startswith("video/")
