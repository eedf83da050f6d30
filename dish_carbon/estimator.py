# dish_carbon/estimator.py - dish name / photo -> ingredients -> kg CO2e
from __future__ import annotations
import traceback
from typing import List, Optional, Protocol

from .cache import ResultCache, content_hash
from .errors import EstimationError
from .factors import EmissionFactorTable
from .integrations.openai_chat import (
    ProviderRequest,
    ProviderResponse,
    image_data_url,
    vision_content,
)
from .parsers import extract_dish_name, extract_ingredient_list
from .ratelimit import RateLimiter
from .retry import IMAGE_TIMEOUT_S, TEXT_TIMEOUT_S, RetryPolicy
from .schemas import EstimateResult, Ingredient, round1

UNKNOWN_DISH = "Unknown Dish"
FALLBACK_KG = 1.0
DEFAULT_MIME = "image/jpeg"

INGREDIENTS_PROMPT = (
    "You are a strict JSON generator.\n"
    "Given a dish name, return ONLY a JSON array of its likely main ingredients (strings).\n"
    "No prose, no backticks, no explanations.\n"
    'Example output: ["rice","chicken","spices"]\n'
    "Dish: {dish}\n"
)
DISH_PROMPT = "Identify the dish in the image. Reply with ONLY the dish name."

RATE_LIMIT_NOTICE = "the AI provider is rate limiting requests, please try again in a minute"


class ChatProvider(Protocol):
    async def complete(self, request: ProviderRequest, timeout: Optional[float] = None) -> ProviderResponse:
        ...


def capitalize(s: Optional[str]) -> str:
    s = (s or "").strip()
    return s[:1].upper() + s[1:].lower()


def fallback(dish: Optional[str], error: Optional[str]) -> EstimateResult:
    return EstimateResult(
        dish=dish or UNKNOWN_DISH,
        ingredients=[Ingredient(name="Unknown", carbon_kg=FALLBACK_KG)],
        error=error or "Unknown error",
    )


def describe_failure(exc: BaseException, label: str = "OpenAI") -> str:
    """Human-readable error for a fallback result."""
    status = getattr(exc, "status_code", None)
    if status is not None:
        msg = f"{label} HTTP {status}"
        if status == 429:
            msg += f" - {RATE_LIMIT_NOTICE}"
        return msg
    return str(exc) or exc.__class__.__name__


def error_body(exc: BaseException) -> str:
    """Response body of the HTTP failure behind `exc`, if there was one."""
    err = getattr(exc, "last_error", exc)
    return getattr(err, "body", "") or ""


class CarbonEstimator:
    def __init__(
        self,
        provider: ChatProvider,
        model: str,
        vision_model: str,
        rate_limiter: RateLimiter,
        retry_policy: Optional[RetryPolicy] = None,
        cache: Optional[ResultCache] = None,
        factors: Optional[EmissionFactorTable] = None,
    ):
        self.provider = provider
        self.model = model
        self.vision_model = vision_model
        self.rate_limiter = rate_limiter
        self.retry_policy = retry_policy or RetryPolicy()
        self.cache = cache if cache is not None else ResultCache()
        self.factors = factors or EmissionFactorTable()

    async def aclose(self) -> None:
        close = getattr(self.provider, "close", None)
        if close is not None:
            await close()

    async def _call(self, request: ProviderRequest, timeout: float) -> str:
        await self.rate_limiter.acquire_slot()
        rsp = await self.retry_policy.run(
            lambda: self.provider.complete(request, timeout=timeout), timeout=timeout
        )
        print(f"[ai] {request.model} replied HTTP {rsp.status_code}")
        return rsp.text

    def _ingredients(self, names: List[str]) -> List[Ingredient]:
        out: List[Ingredient] = []
        for s in names:
            name = s.strip().lower()
            if not name:
                continue
            kg = self.factors.lookup(name)
            out.append(Ingredient(name=capitalize(name), carbon_kg=round1(kg)))
        return out

    # ---------- text path ----------
    async def estimate_from_dish_name(self, dish_name: Optional[str]) -> EstimateResult:
        if not dish_name or not dish_name.strip():
            return fallback(UNKNOWN_DISH, "Dish name is empty")
        dish_name = dish_name.strip()

        request = ProviderRequest(
            model=self.model,
            content=INGREDIENTS_PROMPT.format(dish=dish_name),
            max_tokens=200,
        )
        try:
            print(f"[ai] inferring ingredients for dish: {dish_name!r}")
            raw = await self._call(request, TEXT_TIMEOUT_S)
            names = extract_ingredient_list(raw)
            print(f"[ai] ingredients: {names}")
            return EstimateResult(dish=capitalize(dish_name), ingredients=self._ingredients(names))
        except EstimationError as e:
            print(f"[ai] estimate failed for {dish_name!r}: {e!r}")
            if body := error_body(e):
                print(f"[ai] provider said: {body[:500]}")
            return fallback(capitalize(dish_name), describe_failure(e))
        except Exception as e:
            traceback.print_exc()
            return fallback(capitalize(dish_name), describe_failure(e))

    # ---------- image path ----------
    async def estimate_from_image(self, data: Optional[bytes], mime_type: Optional[str] = None) -> EstimateResult:
        if not data:
            return fallback(UNKNOWN_DISH, "Empty image uploaded")
        if not mime_type or not mime_type.startswith("image/"):
            mime_type = DEFAULT_MIME

        key = content_hash(data)
        cached = self.cache.get(key)
        if cached is not None:
            print(f"[cache] hit {key[:12]}")
            return cached

        request = ProviderRequest(
            model=self.vision_model,
            content=vision_content(DISH_PROMPT, image_data_url(data, mime_type)),
            max_tokens=50,
        )
        try:
            print(f"[ai] sending {len(data)} byte image to {self.vision_model}")
            raw = await self._call(request, IMAGE_TIMEOUT_S)
            dish_name = extract_dish_name(raw)
        except EstimationError as e:
            print(f"[ai] dish identification failed: {e!r}")
            if body := error_body(e):
                print(f"[ai] provider said: {body[:500]}")
            return fallback(UNKNOWN_DISH, describe_failure(e, "OpenAI Vision"))
        except Exception as e:
            traceback.print_exc()
            return fallback(UNKNOWN_DISH, describe_failure(e, "OpenAI Vision"))

        if not dish_name:
            return fallback(UNKNOWN_DISH, "Vision model returned empty dish name")

        print(f"[ai] vision says: {dish_name!r}")
        result = await self.estimate_from_dish_name(dish_name)
        self.cache.put(key, result)
        return result
