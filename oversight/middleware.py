"""Request pipeline for the oversight API: CORS, rate limits and request logging."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from oversight.config import Settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Query parameters that identify the record a request is about
_SCOPE_PARAMS = ("entity_id", "framework_id")

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def configure_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the dashboard origins to call the API."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


def configure_rate_limiting(app: FastAPI, settings: Settings) -> None:
    """Apply ``rate_limit_default`` per client address to every route."""
    app.state.limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit_default])
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)


async def request_logging_middleware(request: Request, call_next) -> Response:
    """Bind a request id to every log line and emit one ``http_request`` event.

    The id is taken from the ``X-Request-ID`` header when the caller sends
    one and is echoed back on the response.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    scope = {name: request.query_params[name] for name in _SCOPE_PARAMS if name in request.query_params}

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **scope)

    start = time.monotonic()
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id

    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        route=getattr(request.scope.get("route"), "path", None),
        status_code=response.status_code,
        duration_ms=round((time.monotonic() - start) * 1000, 2),
    )
    return response


def configure_request_logging(app: FastAPI) -> None:
    app.middleware("http")(request_logging_middleware)


def configure_structured_logging(settings: Settings) -> None:
    """Route structlog through stdlib logging with a JSON or console renderer."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.basicConfig(format="%(message)s", level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and record the scoring policy the service runs with."""
    settings: Settings = app.state.settings
    configure_structured_logging(settings)

    policy = settings.scoring
    logger.info(
        "application_starting",
        version=settings.app_version,
        environment=settings.environment,
        compliance_weight=policy.compliance_weight,
        risk_severity_weight=policy.risk_severity_weight,
        maturity_weights=policy.maturity_weights,
    )

    yield

    logger.info("application_stopped")
