"""
Main entrypoint for the Digital Bank API.

This module assembles the FastAPI application, sets up logging,
registers the error handlers and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn digital_bank_api.app.main:app --reload
"""

import logging
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.errors import BankError, ErrorKind
from .core.logging_config import setup_logging
from .services.login_throttle import LoginThrottle

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    return f"{location}: {message}" if location else message


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as ``{"code": ..., "message": ...}``."""

    @app.exception_handler(BankError)
    async def bank_error_handler(request: Request, exc: BankError) -> JSONResponse:
        return JSONResponse(status_code=exc.kind.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        kind = ErrorKind.VALIDATION_FAILED
        return JSONResponse(
            status_code=kind.status_code,
            content={"code": kind.value, "message": _validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = HTTPStatus(exc.status_code).name
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": code, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )


def create_app(throttle: Optional[LoginThrottle] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    throttle : LoginThrottle, optional
        Failed-login tracker for this application.  A fresh in-memory
        one is created when omitted.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.state.login_throttle = throttle or LoginThrottle()

    register_error_handlers(app)
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file on first start.
        init_db()
        logger.info("%s %s started", settings.project_name, settings.api_version)

    return app


app = create_app()
