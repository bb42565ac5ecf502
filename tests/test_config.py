import pytest

from video2doc.config import GEMINI_OPENAI_BASE_URL, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "API_KEY", "LLM_BASE_URL", "LLM_MODEL", "FRAME_COUNT", "JPEG_QUALITY", "FETCH_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    settings = get_settings()
    assert settings.api_key == "key"
    assert settings.base_url == GEMINI_OPENAI_BASE_URL
    assert settings.llm_model == "gemini-2.5-flash"
    assert settings.frame_count == 10
    assert settings.jpeg_quality == 80


def test_api_key_fallback_and_overrides(monkeypatch):
    monkeypatch.setenv("API_KEY", "fallback")
    monkeypatch.setenv("FRAME_COUNT", "6")
    monkeypatch.setenv("LLM_MODEL", "other-model")
    settings = get_settings()
    assert settings.api_key == "fallback"
    assert settings.frame_count == 6
    assert settings.llm_model == "other-model"


def test_missing_key_is_an_error():
    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        get_settings()


def test_bad_frame_count(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv("FRAME_COUNT", "ten")
    with pytest.raises(ValueError, match="FRAME_COUNT"):
        get_settings()


def test_fetch_timeout(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv("FETCH_TIMEOUT", "12.5")
    assert get_settings().fetch_timeout == 12.5


def test_bad_fetch_timeout_names_the_variable(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv("FETCH_TIMEOUT", "soon")
    with pytest.raises(ValueError, match="FETCH_TIMEOUT"):
        get_settings()
