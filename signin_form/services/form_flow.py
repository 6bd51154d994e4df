"""
Two-step email/password workflow.

No server-side session is kept between the steps: the validated email travels
in the redirect URL to the password step and back in the password form. Every
method maps the request input to a ``FlowOutcome`` the router turns into a
response.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union
from urllib.parse import quote

from signin_form.db.connection import (
    ConnectionManager,
    DatabaseConnectionError,
    MissingConfigurationError,
)
from signin_form.domain.credentials import CredentialValidationError, clean, is_valid_email
from signin_form.repositories.record_store import RecordStore, StoreError

logger = logging.getLogger(__name__)

EMAIL_TEMPLATE = "index.html"
PASSWORD_TEMPLATE = "password.html"
SUCCESS_TEMPLATE = "success.html"

INVALID_EMAIL_MESSAGE = "Please enter a valid email."
MISSING_PASSWORD_MESSAGE = "Please enter your password."
CONFIG_ERROR_MESSAGE = "Server config error: set MONGO_URI in the environment."
SAVE_ERROR_MESSAGE = "Unable to save data to database. Check MongoDB connection."


@dataclass
class RenderView:
    template: str
    context: dict[str, Any] = field(default_factory=dict)
    status_code: int = 200


@dataclass
class Redirect:
    location: str
    status_code: int = 302


FlowOutcome = Union[RenderView, Redirect]


def password_step_url(email: str) -> str:
    return f"/password?email={quote(email, safe='')}"


def _email_form(error: Optional[str], email: str, status_code: int = 200) -> RenderView:
    return RenderView(EMAIL_TEMPLATE, {"error": error, "email": email}, status_code)


def _password_form(error: Optional[str], email: str, status_code: int = 200) -> RenderView:
    return RenderView(PASSWORD_TEMPLATE, {"error": error, "email": email}, status_code)


class FormFlow:
    """Handles the email step, the password step and the final submission."""

    def __init__(self, connection: ConnectionManager, store: RecordStore) -> None:
        self.connection = connection
        self.store = store

    def enter(self) -> FlowOutcome:
        return _email_form(None, "")

    def submit_email(self, raw_email: str | None) -> FlowOutcome:
        email = clean(raw_email)
        if not is_valid_email(email):
            return _email_form(INVALID_EMAIL_MESSAGE, email, status_code=400)
        # lowercasing happens when the record is written
        return Redirect(password_step_url(email))

    def request_password_step(self, carried_email: str | None) -> FlowOutcome:
        email = clean(carried_email)
        if not email:
            return Redirect("/")
        return _password_form(None, email)

    async def submit_password(self, carried_email: str | None, raw_password: str | None) -> FlowOutcome:
        email = clean(carried_email)
        password = clean(raw_password)
        if not email:
            return Redirect("/")
        if not password:
            return _password_form(MISSING_PASSWORD_MESSAGE, email, status_code=400)

        try:
            await self.connection.ensure_connected()
            await self.store.append(email, password)
        except CredentialValidationError as exc:
            return _password_form(exc.message, email, status_code=400)
        except MissingConfigurationError as exc:
            logger.error("MongoDB save failed: %s", exc.message)
            return _password_form(CONFIG_ERROR_MESSAGE, email, status_code=500)
        except (DatabaseConnectionError, StoreError) as exc:
            logger.error("MongoDB save failed: %s", exc, exc_info=exc)
            return _password_form(SAVE_ERROR_MESSAGE, email, status_code=500)
        return RenderView(SUCCESS_TEMPLATE, {"email": email})
