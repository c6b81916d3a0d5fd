from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from todo_api.core.config import get_settings
from todo_api.db.create_tables import init_db
from todo_api.domain.identity import DEFAULT_ROLES
from todo_api.routers import account as account_router
from todo_api.routers import todo as todo_router

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers for JSON responses."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cache-Control", "no-store")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Flatten validation errors into {field: [messages]} with a 400 status."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        key = ".".join(loc) or "body"
        errors.setdefault(key, []).append(error.get("msg", "Invalid value."))
    return JSONResponse(errors, status_code=400)


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    init_db()
    logger.info("Schema ready; roles seeded: %s", ", ".join(DEFAULT_ROLES))
    yield


def create_app() -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``--factory``)."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="To-do API", lifespan=lifespan)

    allowed_cors = set(settings.cors_origins)
    if settings.app_env != "prod":
        allowed_cors.update(
            {
                "http://localhost:3000",
                "http://127.0.0.1:3000",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            }
        )
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(account_router.router)
    app.include_router(todo_router.list_router)
    app.include_router(todo_router.item_router)
    return app
