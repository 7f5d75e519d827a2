"""FastAPI application factory.

    uvicorn taskboard.main:create_app --factory
"""
import logging
import traceback
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.api import health
from taskboard.api.responses import failure
from taskboard.api.v1 import auth, projects, realtime, tasks, users
from taskboard.application import Application
from taskboard.config import Settings
from taskboard.errors import AppError, NotFoundError

logger = logging.getLogger(__name__)

SANITIZED_MESSAGE = "Something went wrong!"

# Request locations FastAPI prefixes onto validation error paths
_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def _stack(exc: BaseException) -> List[str]:
    lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return [line.strip() for chunk in lines for line in chunk.splitlines() if line.strip()]


def _field_errors(exc: RequestValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for error in exc.errors():
        path = [str(part) for part in error.get("loc", ()) if part not in _LOCATIONS]
        errors.setdefault(".".join(path) or "body", error.get("msg", "Invalid value"))
    return errors


def register_exception_handlers(app: FastAPI, config: Settings) -> None:
    def render(exc: BaseException, status_code: int, message: str, error=None):
        if config.is_production and status_code >= 500:
            message = SANITIZED_MESSAGE
        stack = _stack(exc) if config.ENVIRONMENT == "development" else None
        return failure(message, status_code, error=error, stack=stack)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        else:
            logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
        return render(exc, exc.status_code, exc.message, exc.error)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = _field_errors(exc)
        logger.info("%s %s -> 422 %s", request.method, request.url.path, errors)
        return render(exc, 422, "Validation failed", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = NotFoundError.default_message if exc.status_code == 404 else str(exc.detail)
        return render(exc, exc.status_code, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
        return render(exc, 500, str(exc) or SANITIZED_MESSAGE)


def create_app(application: Optional[Application] = None) -> FastAPI:
    application = application if application is not None else Application()
    config = application.config

    app = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        debug=False,
        lifespan=application.lifespan,
    )
    app.state.application = application

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, config)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(projects.router)
    app.include_router(tasks.router)
    app.include_router(users.router)
    app.include_router(realtime.router)
    return app
