"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.tm_admin.api.router import router as admin_router
from src.tm_common.database import async_session_factory, engine
from src.tm_common.errors import AppError
from src.tm_common.redis_client import close_redis, get_redis
from src.tm_common.response import app_error_response
from src.tm_gateway.middleware.request_log import RequestLogMiddleware
from src.tm_listing.api.router import router as listing_router
from src.tm_order.api.router import router as order_router
from src.tm_reconcile.lease import RedisSweepLease
from src.tm_reconcile.sweeper import TimeoutSweeper

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, start the sweeper. Shutdown: stop it, dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    sweeper = TimeoutSweeper(async_session_factory, lease=RedisSweepLease())
    app.state.sweeper = sweeper
    if settings.SWEEPER_ENABLED:
        sweeper.start()
    yield
    # Shutdown
    await sweeper.stop()
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
    resp = app_error_response(exc)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(order_router, prefix="/api/v1")
app.include_router(listing_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
