from __future__ import annotations

from collections.abc import Awaitable
from pathlib import Path
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import FormData
from starlette.responses import Response

from monji_web.auth import LOGIN_PATH, PageRedirect
from monji_web.client import ApiError, MonjiApiClient, segment
from monji_web.models import ActionFailure

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
# Links built in templates must encode names the same way redirects do.
templates.env.filters["segment"] = segment


def get_api_client(request: Request) -> MonjiApiClient:
    client = getattr(request.app.state, "api_client", None)
    if client is None:
        raise HTTPException(status_code=500, detail="API client not initialized")
    return client


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def form_str(form: FormData, key: str) -> str | None:
    """Return the field if it was submitted as text; None when missing or a file upload."""

    value = form.get(key)
    if isinstance(value, str):
        return value
    return None


async def fetch_or_redirect(call: Awaitable[Any], fallback: str) -> dict[str, Any]:
    """Await one API read; any failure sends the browser to `fallback` instead."""

    try:
        data = await call
    except ApiError as exc:
        raise PageRedirect(fallback) from exc
    return data if isinstance(data, dict) else {}


async def load_session_context(client: MonjiApiClient, token: str) -> dict[str, Any]:
    """Current user plus the environment list every page's navbar shows."""

    user_data = await fetch_or_redirect(client.whoami(token), LOGIN_PATH)
    env_data = await fetch_or_redirect(client.list_environments(token), LOGIN_PATH)
    return {
        "user": user_data.get("user"),
        "environments": env_data.get("environments") or [],
    }


def databases_url(env_id: str) -> str:
    return f"/environments/{segment(env_id)}/databases"


def collections_url(env_id: str, db_name: str) -> str:
    return f"{databases_url(env_id)}/{segment(db_name)}/collections"


def documents_url(env_id: str, db_name: str, collection_name: str) -> str:
    return f"{collections_url(env_id, db_name)}/{segment(collection_name)}/documents"


def render_page(
    request: Request,
    template: str,
    ctx: dict[str, Any],
    *,
    form: ActionFailure | None = None,
) -> Response:
    context = dict(ctx)
    context["form"] = form.model_dump() if form is not None else None
    status_code = form.status_code if form is not None else 200
    return templates.TemplateResponse(request, template, context, status_code=status_code)


def render_failure(
    request: Request, template: str, ctx: dict[str, Any], failure: ActionFailure
) -> Response:
    """Render a failed action from the route's own context, without reading the API again.

    The navbar renders empty and listings stay unloaded; the status is always the failure's.
    """

    context = {"user": None, "environments": [], **ctx}
    return render_page(request, template, context, form=failure)
