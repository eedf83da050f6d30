# dish_carbon/errors.py - failures raised below the estimator boundary
from __future__ import annotations
from typing import Optional


class EstimationError(Exception):
    """Base class for everything the estimator turns into a fallback result."""


class ProviderError(EstimationError):
    retryable = False
    status_code: Optional[int] = None


class ProviderHTTPError(ProviderError):
    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"provider returned HTTP {status_code}")

    @property
    def retryable(self) -> bool:
        return self.status_code == 429 or 500 <= self.status_code < 600


class ProviderTimeoutError(ProviderError):
    retryable = True


class ProviderConnectionError(ProviderError):
    pass


class RetriesExhaustedError(EstimationError):
    def __init__(self, last_error: ProviderError, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"gave up after {attempts} attempts: {last_error}")

    @property
    def status_code(self) -> Optional[int]:
        return self.last_error.status_code


class ResponseParseError(EstimationError):
    pass
