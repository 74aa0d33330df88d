from contextlib import asynccontextmanager
from typing import Callable, Optional
from datetime import datetime
import logging

from fastapi import FastAPI, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
import redis

from shorturls.core.config import Settings, settings as default_settings
from shorturls.core.errors import ShortURLError
from shorturls.core.logging_config import configure_logging
from shorturls.api import shortener
from shorturls.db.repository import LinkStore
from shorturls.services.collector import CollectorClient
from shorturls.services.shortener import LinkService
from shorturls.services.sweeper import ExpiredLinkSweeper
from shorturls.RateLimitHelper import (
    build_redis_client,
    check_rate_limit,
    get_client_ip,
    is_exempt_path,
    rate_limit_key,
    verify_redis_connection,
)

logger = logging.getLogger("shorturls.main")


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], datetime]] = None,
    redis_client: Optional[redis.Redis] = None,
    collector: Optional[CollectorClient] = None,
) -> FastAPI:
    settings = settings or default_settings
    collector = collector or CollectorClient.from_settings(settings)
    configure_logging(settings.LOG_LEVEL, collector)

    store = LinkStore(clock=clock)
    service = LinkService(
        store,
        code_length=settings.SHORTCODE_LENGTH,
        max_attempts=settings.SHORTCODE_MAX_ATTEMPTS,
    )
    sweeper = ExpiredLinkSweeper(
        store, settings.SWEEP_INTERVAL_SECONDS, settings.EXPIRED_RETENTION_MINUTES
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if collector is not None:
            collector.start()
        sweeper.start()
        if settings.RATE_LIMIT_ENABLED:
            await run_in_threadpool(verify_redis_connection, app.state.redis_client)
        logger.info(
            f"Application '{settings.PROJECT_NAME}' starting up.", extra={"package": "service"}
        )
        yield
        logger.info("Shutting down gracefully...", extra={"package": "service"})
        sweeper.stop()
        store.clear()
        try:
            app.state.redis_client.close()
        except redis.exceptions.RedisError:
            logger.debug("Error closing Redis client")
        if collector is not None:
            collector.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="URL shortener with expiring links and click analytics",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.link_service = service
    app.state.redis_client = redis_client or build_redis_client(settings)
    app.state.collector = collector

    @app.get("/health", tags=["health"])
    def health_check():
        return {"status": "healthy", "service": "url-shortener"}

    app.include_router(shortener.router, prefix="")

    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED or is_exempt_path(request.url.path):
            return await call_next(request)

        limit, window = settings.RATE_LIMIT_LIMIT, settings.RATE_LIMIT_WINDOW
        key = rate_limit_key(get_client_ip(request))

        allowed = await run_in_threadpool(
            check_rate_limit, request.app.state.redis_client, key, limit, window
        )
        if allowed is False:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers={"Retry-After": str(window)},
                content={"error": "Too many requests, please try again later"},
            )

        return await call_next(request)

    @app.exception_handler(ShortURLError)
    async def short_url_error_handler(request: Request, exc: ShortURLError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True, extra={"package": "handler"})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal Server Error"},
        )

    return app


app = create_app()
