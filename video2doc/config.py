import logging
import os
from dataclasses import dataclass
from dotenv import load_dotenv


load_dotenv()

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
LOG_FORMAT = "[%(levelname)s] [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str
    llm_model: str
    frame_count: int = 10
    jpeg_quality: int = 80
    fetch_timeout: float = 60.0
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


def get_settings() -> Settings:
    api_key = (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()
    base_url = os.getenv("LLM_BASE_URL", GEMINI_OPENAI_BASE_URL)
    llm_model = os.getenv("LLM_MODEL", "gemini-2.5-flash")
    frame_count = _int_env("FRAME_COUNT", 10)
    jpeg_quality = _int_env("JPEG_QUALITY", 80)
    fetch_timeout = _float_env("FETCH_TIMEOUT", 60.0)
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    if not api_key:
        raise ValueError("Missing GEMINI_API_KEY (or API_KEY) in environment or .env")
    if frame_count < 1:
        raise ValueError("FRAME_COUNT must be at least 1")
    if not 1 <= jpeg_quality <= 95:
        raise ValueError("JPEG_QUALITY must be between 1 and 95")
    return Settings(
        api_key=api_key,
        base_url=base_url,
        llm_model=llm_model,
        frame_count=frame_count,
        jpeg_quality=jpeg_quality,
        fetch_timeout=fetch_timeout,
        log_level=log_level,
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))
