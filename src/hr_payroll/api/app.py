"""FastAPI application factory."""

import logging
import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from hr_payroll.api.routes import API_ROUTERS, health_router
from hr_payroll.config import Settings, configure_logging, get_settings
from hr_payroll.database import create_schema, dispose_db, init_db
from hr_payroll.errors import (
    AuthenticationError,
    DuplicateEntityError,
    EntityNotFoundError,
    PermissionDeniedError,
)
from hr_payroll.services import InvalidTransitionError, QueryCache, TokenSigner

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    engine, _ = init_db(settings.database_url)
    if settings.create_schema:
        await create_schema(engine)
        logger.info("Database schema created")
    yield
    app.state.cache.clear()
    await dispose_db()


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error(status_code: int, detail: str, code: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code, **extra})


def _validation_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(location), "message": error.get("msg", "Invalid value")})
    return errors


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Map domain exceptions to JSON error responses."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "Validation error",
                "code": "VALIDATION_ERROR",
                "errors": _validation_errors(exc),
            },
        )

    @app.exception_handler(EntityNotFoundError)
    async def not_found_handler(request: Request, exc: EntityNotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc), "NOT_FOUND")

    @app.exception_handler(AuthenticationError)
    async def authentication_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
        response = _error(status.HTTP_401_UNAUTHORIZED, str(exc), "UNAUTHORIZED")
        response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(PermissionDeniedError)
    async def permission_denied_handler(
        request: Request, exc: PermissionDeniedError
    ) -> JSONResponse:
        return _error(
            status.HTTP_403_FORBIDDEN,
            str(exc),
            "FORBIDDEN",
            module=exc.module,
            action=exc.action,
        )

    @app.exception_handler(InvalidTransitionError)
    async def transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            str(exc),
            "INVALID_STATUS_TRANSITION",
            from_status=exc.from_status,
            to_status=exc.to_status,
        )

    @app.exception_handler(DuplicateEntityError)
    async def duplicate_handler(request: Request, exc: DuplicateEntityError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc), "DUPLICATE", field=exc.field)

    @app.exception_handler(IntegrityError)
    async def integrity_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.info("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        extra = {} if settings.is_production else {"error": str(exc.orig)}
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Constraint violation",
            "INTEGRITY_ERROR",
            **extra,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        request_id = _request_id(request)
        logger.exception("Unhandled error [%s] %s %s", request_id, request.method, request.url.path)
        content: dict[str, object] = {
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
            "request_id": request_id,
        }
        if not settings.is_production:
            content["error"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_request_middleware(app: FastAPI, settings: Settings) -> None:
    """Request id and response time headers, one log line per request."""

    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms:.2f}ms"

        level = logging.WARNING if elapsed_ms > settings.slow_request_ms else logging.INFO
        logger.log(
            level,
            "[%s] %s %s %s %.2fms",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="HR Payroll API",
        description="Employees, vacations, terminations, advances and payroll administration",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.cache = QueryCache(
        max_size=settings.cache_max_size,
        default_ttl=settings.cache_default_ttl_seconds,
    )
    app.state.signer = TokenSigner(settings.secret_key, settings.token_ttl_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, RESPONSE_TIME_HEADER],
    )
    register_request_middleware(app, settings)
    register_exception_handlers(app, settings)

    app.include_router(health_router)
    for router in API_ROUTERS:
        app.include_router(router, prefix="/api")

    return app


configure_logging(get_settings().log_level)

# Default app instance for uvicorn
app = create_app()
