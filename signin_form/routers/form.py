from __future__ import annotations

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from signin_form.services.form_flow import FlowOutcome, FormFlow, Redirect

router = APIRouter(prefix="", tags=["form"])


def _templates(request: Request):
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def _flow(request: Request) -> FormFlow:
    flow = getattr(getattr(request.app, "state", None), "form_flow", None)
    if flow:
        return flow
    raise RuntimeError("Form flow not configured")


def _respond(request: Request, outcome: FlowOutcome) -> Response:
    if isinstance(outcome, Redirect):
        return RedirectResponse(outcome.location, status_code=outcome.status_code)
    templates = _templates(request)
    return templates.TemplateResponse(
        request,
        outcome.template,
        outcome.context,
        status_code=outcome.status_code,
    )


@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    return _respond(request, _flow(request).enter())


@router.post("/next")
def next_step(request: Request, email: str = Form("")):
    return _respond(request, _flow(request).submit_email(email))


@router.get("/password", response_class=HTMLResponse)
def password(request: Request, email: str = ""):
    return _respond(request, _flow(request).request_password_step(email))


@router.post("/signin")
async def signin(request: Request, email: str = Form(""), password: str = Form("")):
    outcome = await _flow(request).submit_password(email, password)
    return _respond(request, outcome)
