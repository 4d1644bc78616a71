"""
app/main.py

Purpose: Application entry point

- Lifespan: settings check, MongoDB connection, indexes
- Request context (X-Request-Id, timing) for every log line of a request
- Routers for auth, Telegram verification, location, navigation, orders, admin
"""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import bind_context, clear_context, get_logger, setup_logging
from app.db.indexes import create_indexes
from app.db.mongo import close_mongo_connection, connect_to_mongo, database_status
from app.api import admin, auth, location, navigation, orders, telegram

setup_logging()
logger = get_logger(__name__)

APP_VERSION = "1.0.0"
SLOW_REQUEST_SECONDS = 5.0

ROUTERS = (
    (auth.router, "Auth"),
    (telegram.router, "Telegram"),
    (location.router, "Location"),
    (navigation.router, "Navigation"),
    (orders.router, "Orders"),
    (admin.router, "Admin"),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting storefront API...")
    try:
        validate_settings()
        await connect_to_mongo()
        await create_indexes()
    except Exception as e:
        logger.critical(f"Failed to start application: {e}", exc_info=True)
        raise
    logger.info(f"🎉 Storefront API started ({settings.ENVIRONMENT}, debug={settings.DEBUG})")

    yield

    await close_mongo_connection()
    logger.info("👋 Storefront API shut down")


app = FastAPI(
    title="Game Design Storefront",
    description="Free design orders with Telegram and location verification",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """
    Tags the request's logs with an id (client-supplied or fresh) and
    reports its duration.
    """
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex[:12]
    clear_context()
    bind_context(request_id=request_id)

    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    response.headers["X-Request-Id"] = request_id
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    # geocoding and bot calls are the slow paths
    if elapsed > SLOW_REQUEST_SECONDS:
        logger.warning(f"🐢 Slow request: {request.method} {request.url.path} took {elapsed:.1f}s")
    return response


for api_router, tag in ROUTERS:
    app.include_router(api_router, prefix=settings.API_PREFIX, tags=[tag])


@app.get("/", tags=["Health"])
async def root():
    return {
        "name": "Game Design Storefront API",
        "version": APP_VERSION,
        "status": "running",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    200 while MongoDB answers a ping, 503 otherwise.
    """
    database = await database_status()
    return JSONResponse(
        status_code=200 if database["healthy"] else 503,
        content={
            "status": "healthy" if database["healthy"] else "degraded",
            "version": APP_VERSION,
            "database": database,
        },
    )
