"""
FastAPI application entry point.
Mount routes, Prometheus metrics, error rendering and logging.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from solarpanels.api.v1.router import api_router
from solarpanels.cache.redis_client import close_redis
from solarpanels.config import get_settings
from solarpanels.core.exceptions import ServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Shutdown: release the shared Redis connection pool."""
    yield
    await close_redis()


def _error(status_code: int, kind: str, detail) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": kind, "detail": detail})


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail, exc_info=exc)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    response = _error(exc.status_code, exc.kind, exc.detail)
    if headers:
        response.headers.update(headers)
    return response


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and parameters are content errors (400), like every other validation failure."""
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return _error(status.HTTP_400_BAD_REQUEST, "bad_request", errors)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """No silent failures, and no store error text in responses."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal", "Internal server error")


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(
        title=settings.app_name,
        description="Solar panel requests: cart, forming, moderation and power calculation.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Prometheus metrics at /metrics
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()
