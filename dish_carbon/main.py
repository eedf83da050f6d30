# dish_carbon/main.py
from dotenv import load_dotenv
load_dotenv()  # load .env before anything else

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from .cache import ResultCache
from .config import Settings, load_settings
from .estimator import UNKNOWN_DISH, CarbonEstimator, fallback
from .integrations.openai_chat import OpenAIChatProvider
from .ratelimit import RateLimiter
from .retry import RetryPolicy
from .schemas import DishRequest, EstimateResult


def build_estimator(settings: Settings) -> CarbonEstimator:
    """Wire one limiter and one cache for the whole process."""
    return CarbonEstimator(
        provider=OpenAIChatProvider(settings.openai_api_key, settings.openai_base_url),
        model=settings.model,
        vision_model=settings.vision_model,
        rate_limiter=RateLimiter(
            min_interval_ms=settings.rate_limit_min_interval_ms,
            enabled=settings.rate_limit_enabled,
        ),
        retry_policy=RetryPolicy(),
        cache=ResultCache(),
    )


def create_app(estimator: Optional[CarbonEstimator] = None) -> FastAPI:
    estimator = estimator or build_estimator(load_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.estimator.aclose()

    app = FastAPI(title="Dish Carbon Estimator", lifespan=lifespan)
    app.state.estimator = estimator

    @app.get("/health")
    def health():
        return {"ok": True}

    # ---- Estimates ------------------------------------------------------------
    @app.post("/api/estimate", response_model=EstimateResult)
    async def estimate(body: DishRequest, request: Request):
        print(f"[api] estimate dish={body.dish!r}")
        return await request.app.state.estimator.estimate_from_dish_name(body.dish)

    @app.post("/api/estimate/image", response_model=EstimateResult)
    async def estimate_image(request: Request, file: Optional[UploadFile] = File(None)):
        data = await file.read() if file is not None else b""
        if not data:
            body = fallback(UNKNOWN_DISH, "No file uploaded")
            return JSONResponse(body.model_dump(by_alias=True), status_code=400)
        print(f"[api] estimate image {file.filename!r} ({file.content_type}, {len(data)} bytes)")
        return await request.app.state.estimator.estimate_from_image(data, file.content_type)

    # ---- Debug endpoints ------------------------------------------------------
    @app.get("/debug/factor")
    def debug_factor(request: Request, name: str = Query("beef")):
        factors = request.app.state.estimator.factors
        return {"name": name, "kg_co2e": factors.lookup(name), "known": name in factors}

    @app.get("/debug/cache")
    def debug_cache(request: Request):
        return {"entries": len(request.app.state.estimator.cache)}

    return app


app = create_app()
