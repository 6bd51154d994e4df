import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from signin_form.core.config import Settings, get_settings
from signin_form.core.logging_config import configure_logging
from signin_form.db.connection import ConnectionManager
from signin_form.repositories.record_store import RecordStore
from signin_form.routers import form as form_router
from signin_form.services.form_flow import FormFlow

BASE = os.path.dirname(__file__)
WEB = os.path.join(BASE, "web")
TEMPLATES = os.path.join(BASE, "templates")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; img-src 'self' data:; style-src 'self'; form-action 'self'",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        # the email travels in the password step URL
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def create_app(settings: Settings | None = None, connection: ConnectionManager | None = None) -> FastAPI:
    """Factory for uvicorn/gunicorn: ``uvicorn --factory signin_form.app:create_app``."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    connection = connection or ConnectionManager.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await connection.close()

    app = FastAPI(title="Signin Form", lifespan=lifespan)
    app.mount("/static", StaticFiles(directory=WEB), name="static")
    app.state.templates = Jinja2Templates(directory=TEMPLATES)
    app.state.connection = connection
    app.state.form_flow = FormFlow(connection, RecordStore(connection))
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.include_router(form_router.router)
    return app

