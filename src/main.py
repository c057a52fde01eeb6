"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.sm_asset.api.router import metadata_router
from src.sm_asset.api.router import router as collectible_router
from src.sm_auction.api.router import router as auction_router
from src.sm_common.database import engine
from src.sm_common.errors import AppError
from src.sm_common.redis_client import close_redis, get_redis
from src.sm_common.response import error_response
from src.sm_config.api.router import router as settings_router
from src.sm_gateway.middleware.request_log import RequestLogMiddleware
from src.sm_listing.api.router import router as listing_router
from src.sm_order.api.router import admin_router as order_admin_router
from src.sm_order.api.router import router as order_router
from src.sm_payment.api.router import router as telegram_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    redis = await get_redis()
    await redis.ping()
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(collectible_router, prefix="/api/v1")
app.include_router(listing_router, prefix="/api/v1")
app.include_router(auction_router, prefix="/api/v1")
app.include_router(order_router, prefix="/api/v1")
app.include_router(order_admin_router, prefix="/api/v1")
app.include_router(settings_router, prefix="/api/v1")
app.include_router(metadata_router)
app.include_router(telegram_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
