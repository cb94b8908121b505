"""FastAPI application factory.

``create_app`` wires configuration, the shared provider client, services,
middleware and exception handlers into one application. The provider
client is created once here (or injected) and shared by every request.
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import AsyncOpenAI
from starlette.exceptions import HTTPException as StarletteHTTPException

from speakpractice import __version__
from speakpractice.api.practice import router as practice_router
from speakpractice.api.rate_limit import FixedWindowRateLimiter, client_key
from speakpractice.config.settings import AppSettings
from speakpractice.exceptions import (
    ErrorCode,
    InvalidRequestError,
    RateLimitExceededError,
    SpeakPracticeError,
)
from speakpractice.logger import get_logger
from speakpractice.providers.drivers import OpenAIDriver, build_openai_client
from speakpractice.schemas.envelope import error_payload, success_payload, utc_timestamp
from speakpractice.services import (
    TextGenerationService,
    TranscriptionService,
    TranslationService,
)

logger = get_logger(__name__)

API_VERSION = "v1"


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_payload(code, message, details),
        headers=headers,
    )


def _rate_limit_headers(exc: RateLimitExceededError) -> dict[str, str] | None:
    if exc.retry_after_s is None:
        return None
    return {"Retry-After": str(max(1, int(exc.retry_after_s + 0.999)))}


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SpeakPracticeError)
    async def handle_service_error(request: Request, exc: SpeakPracticeError) -> JSONResponse:
        # Provider errors were already logged where they were mapped.
        if isinstance(exc, (InvalidRequestError, RateLimitExceededError)):
            logger.info(
                "Request rejected: method=%s, path=%s, code=%s, message=%s",
                request.method,
                request.url.path,
                exc.code.value,
                exc.message,
            )
        headers = (
            _rate_limit_headers(exc) if isinstance(exc, RateLimitExceededError) else None
        )
        return _error_response(
            exc.status_code, exc.code.value, exc.message, exc.details, headers
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())),
                "message": error.get("msg", ""),
            }
            for error in exc.errors()
        ]
        logger.info(
            "Request body rejected: method=%s, path=%s, errors=%d",
            request.method,
            request.url.path,
            len(details),
        )
        return _error_response(
            400, ErrorCode.VALIDATION_ERROR.value, "Validation failed", details
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code in (404, 405):
            return _error_response(404, ErrorCode.NOT_FOUND.value, "Route not found")
        code = (
            ErrorCode.INTERNAL_SERVER_ERROR
            if exc.status_code >= 500
            else ErrorCode.VALIDATION_ERROR
        )
        return _error_response(exc.status_code, code.value, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error: method=%s, path=%s, error_type=%s",
            request.method,
            request.url.path,
            type(exc).__name__,
        )
        logger.debug("Unhandled error details: %s", exc, exc_info=exc)
        return _error_response(
            500, ErrorCode.INTERNAL_SERVER_ERROR.value, "An unexpected error occurred"
        )


def _register_middleware(app: FastAPI, settings: AppSettings) -> None:
    verbose_requests = settings.server.environment == "development"

    @app.middleware("http")
    async def rate_limit(request: Request, call_next: Any) -> Any:
        limiter: FixedWindowRateLimiter | None = request.app.state.global_limiter
        if limiter is not None and request.method != "OPTIONS":
            try:
                await limiter.acquire(client_key(request))
            except RateLimitExceededError as exc:
                return _error_response(
                    exc.status_code,
                    exc.code.value,
                    exc.message,
                    headers=_rate_limit_headers(exc),
                )
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Any) -> Any:
        started = time.perf_counter()
        if verbose_requests:
            logger.info("Request received: method=%s, path=%s", request.method, request.url.path)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - started) * 1000
        log = logger.info if verbose_requests else logger.debug
        log(
            "Request completed: method=%s, path=%s, status=%d, duration_ms=%.1f",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app(settings: AppSettings, client: AsyncOpenAI | None = None) -> FastAPI:
    """Build the HTTP application.

    Args:
        settings: Validated settings.
        client: Optional provider client; built from settings when omitted.

    Returns:
        Configured FastAPI application.

    Raises:
        ConfigError: If no usable provider API key is configured and no
            client was injected.
    """
    if client is None:
        settings.require_provider_credentials()
        client = build_openai_client(settings.openai)

    driver = OpenAIDriver(client, settings.openai)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        async with driver:
            yield
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="speakpractice",
        description="Speaking practice API: transcription, text generation and translation",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.text_service = TextGenerationService(driver, settings.openai)
    app.state.translation_service = TranslationService(driver, settings.openai)
    app.state.transcription_service = TranscriptionService(driver)

    limits = settings.rate_limit
    app.state.global_limiter = (
        FixedWindowRateLimiter(limits.max_requests, limits.window_s)
        if limits.enabled
        else None
    )
    app.state.upload_limiter = (
        FixedWindowRateLimiter(
            limits.upload_max_requests,
            limits.upload_window_s,
            message="Too many file uploads, please slow down",
        )
        if limits.enabled
        else None
    )

    _register_exception_handlers(app)
    _register_middleware(app, settings)

    prefix = settings.server.api_prefix.rstrip("/")
    environment = settings.server.environment

    app.include_router(practice_router, prefix=f"{prefix}/practice", tags=["practice"])

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return success_payload(
            {"status": "ok", "timestamp": utc_timestamp(), "environment": environment}
        )

    @app.get(f"{prefix}/version")
    async def version() -> dict[str, Any]:
        return success_payload(
            {"version": __version__, "apiVersion": API_VERSION, "environment": environment}
        )

    logger.info(
        "Application initialized: environment=%s, api_prefix=%s, rate_limit=%s",
        environment,
        prefix or "/",
        limits.enabled,
    )
    if not settings.openai.topic_prompt.id:
        logger.warning(
            "Topic prompt is not configured: field=openai.topic_prompt.id, "
            "/generate/topic will fail until it is set"
        )
    return app
