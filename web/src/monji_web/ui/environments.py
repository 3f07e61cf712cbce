from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from starlette.responses import Response

from monji_web.auth import require_session_token
from monji_web.client import ApiError, MonjiApiClient
from monji_web.models import fail
from monji_web.ui.common import (
    form_str,
    get_api_client,
    load_session_context,
    redirect,
    render_failure,
    render_page,
)

router = APIRouter(prefix="/environments", tags=["environments"])

TEMPLATE = "environments.html"
LIST_URL = "/environments"


def _page_context() -> dict[str, Any]:
    return {"title": "Environments • Monji", "active": "environments"}


async def load_environments_page(client: MonjiApiClient, token: str) -> dict[str, Any]:
    ctx = _page_context()
    ctx.update(await load_session_context(client, token))
    return ctx


@router.get("", response_class=HTMLResponse)
async def ui_environments_list(
    request: Request,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    ctx = await load_environments_page(client, token)
    return render_page(request, TEMPLATE, ctx)


@router.post("/create", response_model=None)
async def ui_environments_create(
    request: Request,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    name = form_str(form, "name")
    connection_string = form_str(form, "connection_string")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            TEMPLATE,
            _page_context(),
            fail(400, error=error, values={"name": name}),
        )

    if name is None or connection_string is None:
        return _failed("Invalid form data")

    try:
        await client.create_environment(token, name=name, connection_string=connection_string)
    except ApiError:
        return _failed("Failed to create environment")

    return redirect(LIST_URL)


@router.post("/update", response_model=None)
async def ui_environments_update(
    request: Request,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    env_id = form_str(form, "id")
    name = form_str(form, "name")
    connection_string = form_str(form, "connection_string")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            TEMPLATE,
            _page_context(),
            fail(400, error=error, values={"id": env_id, "name": name}),
        )

    if env_id is None or name is None or connection_string is None:
        return _failed("Invalid form data")

    try:
        await client.update_environment(
            token, env_id, name=name, connection_string=connection_string
        )
    except ApiError:
        return _failed("Failed to update environment")

    return redirect(LIST_URL)


@router.post("/delete", response_model=None)
async def ui_environments_delete(
    request: Request,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    env_id = form_str(form, "id")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            TEMPLATE,
            _page_context(),
            fail(400, error=error, values={"id": env_id}),
        )

    if env_id is None:
        return _failed("Invalid environment ID")

    try:
        await client.delete_environment(token, env_id)
    except ApiError:
        return _failed("Failed to delete environment")

    return redirect(LIST_URL)
