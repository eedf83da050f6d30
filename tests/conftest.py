import os

import pytest

os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from dish_carbon.ratelimit import RateLimiter
from fakes import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def open_limiter():
    return RateLimiter(enabled=False)
