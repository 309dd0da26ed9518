"""
FastAPI application entry point for the dashboard.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from dashboard.config import get_settings
from dashboard.errors import BackendError
from dashboard.navigation import screen_url, sidebar_links
from dashboard.routes import router as api_router
from dashboard.screens import SignInRequired, redirect_to, templates
from dashboard.screens import router as screens_router

logger = logging.getLogger(__name__)


def _error_response(request: Request, message, status_code: int):
    settings = get_settings()
    if request.url.path.startswith(settings.api_prefix):
        return JSONResponse({"detail": message}, status_code=status_code)
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "screen": None,
            "sidebar": sidebar_links(request.url.path),
            "error": message,
            "status_code": status_code,
        },
        status_code=status_code,
    )


async def backend_error_handler(request: Request, exc: BackendError):
    logger.warning(
        "%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc
    )
    return _error_response(request, exc.message, exc.status_code)


def _describe_errors(errors) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in errors
    )


async def validation_error_handler(request: Request, exc: ValidationError):
    if request.url.path.startswith(get_settings().api_prefix):
        return JSONResponse(
            {"detail": exc.errors(include_url=False, include_context=False)},
            status_code=422,
        )
    return _error_response(request, _describe_errors(exc.errors()), 422)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    if request.url.path.startswith(get_settings().api_prefix):
        return await request_validation_exception_handler(request, exc)
    return _error_response(request, _describe_errors(exc.errors()), 422)


async def sign_in_required_handler(request: Request, exc: SignInRequired):
    logger.info("%s %s without a session", request.method, request.url.path)
    return redirect_to(screen_url("Signin"))


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app = FastAPI(title="Trackutem Admin Dashboard", version="0.1.0")
    app.add_exception_handler(BackendError, backend_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SignInRequired, sign_in_required_handler)
    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(screens_router)
    return app


app = create_app()
