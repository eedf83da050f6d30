# dish_carbon/config.py - env-driven settings
import os
from typing import List

from pydantic import BaseModel, ConfigDict

from .ratelimit import DEFAULT_MIN_INTERVAL_MS


def require_env(keys: List[str]) -> None:
    missing = [k for k in keys if not os.getenv(k)]
    if missing:
        raise RuntimeError(
            "Missing required env vars: " + ", ".join(missing) +
            ". Create a .env file in your project root with those keys."
        )


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    openai_api_key: str
    openai_base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    vision_model: str = "gpt-4o"
    rate_limit_enabled: bool = True
    rate_limit_min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS


def load_settings() -> Settings:
    """Read settings from the environment (call load_dotenv() first)."""
    require_env(["OPENAI_API_KEY"])
    return Settings(
        openai_api_key=os.environ["OPENAI_API_KEY"],
        openai_base_url=os.getenv("OPENAI_BASE_URL") or "https://api.openai.com/v1",
        model=os.getenv("MODEL", "gpt-4o-mini"),
        vision_model=os.getenv("VISION_MODEL", "gpt-4o"),
        rate_limit_enabled=_flag("RATE_LIMIT_ENABLED", True),
        rate_limit_min_interval_ms=int(os.getenv("RATE_LIMIT_MIN_INTERVAL_MS", DEFAULT_MIN_INTERVAL_MS)),
    )
