import pytest

from dish_carbon.config import load_settings

ENV = ["OPENAI_API_KEY", "OPENAI_BASE_URL", "MODEL", "VISION_MODEL",
       "RATE_LIMIT_ENABLED", "RATE_LIMIT_MIN_INTERVAL_MS"]


@pytest.fixture
def env(monkeypatch):
    for k in ENV:
        monkeypatch.delenv(k, raising=False)
    return monkeypatch


def test_missing_key_fails_fast(env):
    with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
        load_settings()


def test_defaults(env):
    env.setenv("OPENAI_API_KEY", "sk-test")
    s = load_settings()
    assert s.openai_base_url == "https://api.openai.com/v1"
    assert s.model == "gpt-4o-mini"
    assert s.vision_model == "gpt-4o"
    assert s.rate_limit_enabled is True
    assert s.rate_limit_min_interval_ms == 20_000


def test_overrides(env):
    env.setenv("OPENAI_API_KEY", "sk-test")
    env.setenv("OPENAI_BASE_URL", "http://localhost:8080/v1")
    env.setenv("MODEL", "gpt-4.1-mini")
    env.setenv("RATE_LIMIT_ENABLED", "false")
    env.setenv("RATE_LIMIT_MIN_INTERVAL_MS", "500")
    s = load_settings()
    assert s.openai_base_url == "http://localhost:8080/v1"
    assert s.model == "gpt-4.1-mini"
    assert s.rate_limit_enabled is False
    assert s.rate_limit_min_interval_ms == 500
