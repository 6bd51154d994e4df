from __future__ import annotations

import pytest
from pymongo.errors import ServerSelectionTimeoutError, WriteError

from signin_form.db.connection import ConnectionManager
from signin_form.repositories.record_store import RecordStore
from signin_form.services.form_flow import (
    CONFIG_ERROR_MESSAGE,
    INVALID_EMAIL_MESSAGE,
    MISSING_PASSWORD_MESSAGE,
    SAVE_ERROR_MESSAGE,
    FormFlow,
    Redirect,
    RenderView,
)


@pytest.fixture()
def flow(connection) -> FormFlow:
    return FormFlow(connection, RecordStore(connection))


def test_enter_renders_empty_email_form(flow):
    outcome = flow.enter()

    assert outcome == RenderView("index.html", {"error": None, "email": ""}, 200)


@pytest.mark.parametrize("raw", ["not-an-email", "  spaced.example.com ", "", "   "])
def test_submit_email_without_at_is_rejected(flow, raw):
    outcome = flow.submit_email(raw)

    assert isinstance(outcome, RenderView)
    assert outcome.template == "index.html"
    assert outcome.status_code == 400
    assert outcome.context == {"error": INVALID_EMAIL_MESSAGE, "email": raw.strip()}


def test_submit_email_redirects_with_trimmed_encoded_email(flow):
    outcome = flow.submit_email("  Alice+test@Example.com ")

    assert outcome == Redirect("/password?email=Alice%2Btest%40Example.com")


@pytest.mark.parametrize("carried", ["", "   ", None])
def test_password_step_without_email_restarts(flow, carried):
    assert flow.request_password_step(carried) == Redirect("/")


def test_password_step_echoes_email(flow):
    outcome = flow.request_password_step(" a@b.com ")

    assert outcome == RenderView("password.html", {"error": None, "email": "a@b.com"}, 200)


async def test_submit_password_without_email_restarts(flow, fake_mongo):
    assert await flow.submit_password("", "pw") == Redirect("/")
    assert fake_mongo.clients == []


async def test_submit_empty_password_is_rejected(flow, fake_mongo):
    outcome = await flow.submit_password("a@b.com", "   ")

    assert outcome == RenderView(
        "password.html", {"error": MISSING_PASSWORD_MESSAGE, "email": "a@b.com"}, 400
    )
    assert fake_mongo.clients == []


async def test_submit_password_connects_and_stores_one_record(flow, fake_mongo):
    outcome = await flow.submit_password(" Bob@Example.com ", "  hunter2 ")

    assert outcome == RenderView("success.html", {"email": "Bob@Example.com"}, 200)
    assert len(fake_mongo.documents) == 1
    document = fake_mongo.documents[0][2]
    assert document["email"] == "bob@example.com"
    assert document["password"] == "hunter2"


async def test_unreachable_database_renders_generic_error(flow, fake_mongo, caplog):
    fake_mongo.ping_errors.append(ServerSelectionTimeoutError("no servers available"))

    outcome = await flow.submit_password("a@b.com", "pw")

    assert outcome == RenderView("password.html", {"error": SAVE_ERROR_MESSAGE, "email": "a@b.com"}, 500)
    assert fake_mongo.documents == []
    assert "MongoDB save failed" in caplog.text


async def test_write_failure_renders_generic_error(flow, fake_mongo):
    fake_mongo.insert_error = WriteError("rejected")

    outcome = await flow.submit_password("a@b.com", "pw")

    assert outcome.status_code == 500
    assert outcome.context["error"] == SAVE_ERROR_MESSAGE


async def test_missing_configuration_renders_operator_message(fake_mongo):
    manager = ConnectionManager("", "testdb", client_factory=fake_mongo)
    flow = FormFlow(manager, RecordStore(manager))

    outcome = await flow.submit_password("a@b.com", "pw")

    assert outcome.status_code == 500
    assert outcome.context == {"error": CONFIG_ERROR_MESSAGE, "email": "a@b.com"}
    assert fake_mongo.clients == []


async def test_next_submission_retries_after_failure(flow, fake_mongo):
    fake_mongo.ping_errors.append(ServerSelectionTimeoutError("down"))

    first = await flow.submit_password("a@b.com", "pw")
    second = await flow.submit_password("a@b.com", "pw")

    assert first.status_code == 500
    assert second.template == "success.html"
    assert len(fake_mongo.clients) == 2
    assert len(fake_mongo.documents) == 1
