from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from monji_web.auth import require_session_token
from monji_web.client import ApiError, MonjiApiClient
from monji_web.models import fail
from monji_web.ui.common import (
    collections_url,
    databases_url,
    fetch_or_redirect,
    form_str,
    get_api_client,
    load_session_context,
    redirect,
    render_failure,
    render_page,
)

router = APIRouter(prefix="/environments/{env_id}/databases", tags=["databases"])

TEMPLATE = "databases.html"


def _page_context(env_id: str) -> dict[str, Any]:
    return {
        "title": "Databases • Monji",
        "active": "environments",
        "environment": {},
        "databases": [],
        "total_size": None,
        "current_environment_id": env_id,
    }


async def load_databases_page(client: MonjiApiClient, token: str, env_id: str) -> dict[str, Any]:
    ctx = _page_context(env_id)
    ctx.update(await load_session_context(client, token))

    env_data = await fetch_or_redirect(client.get_environment(token, env_id), "/environments")
    db_data = await fetch_or_redirect(client.list_databases(token, env_id), "/environments")

    # The API answers {"Databases": [{Name, SizeOnDisk, Empty, myPermission}], "TotalSize": n}.
    environment = env_data.get("environment") or {}
    ctx.update(
        {
            "environment": environment,
            "databases": db_data.get("Databases") or [],
            "total_size": db_data.get("TotalSize") or 0,
        }
    )
    if environment.get("name"):
        ctx["title"] = f"{environment['name']} • Monji"
    return ctx


@router.get("", response_class=HTMLResponse)
async def ui_databases_list(
    request: Request,
    env_id: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    ctx = await load_databases_page(client, token, env_id)
    return render_page(request, TEMPLATE, ctx)


@router.get("/{db_name}")
async def ui_database_detail(
    env_id: str,
    db_name: str,
    token: str = Depends(require_session_token),
) -> RedirectResponse:
    # A database has no page of its own; its collections are the listing.
    return redirect(collections_url(env_id, db_name))


@router.post("/create", response_model=None)
async def ui_databases_create(
    request: Request,
    env_id: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    db_name = form_str(form, "dbName")
    initial_collection = form_str(form, "initialCollection")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            TEMPLATE,
            _page_context(env_id),
            fail(400, error=error, values={"dbName": db_name}),
        )

    if db_name is None or initial_collection is None:
        return _failed("Invalid form data")

    try:
        await client.create_database(
            token, env_id, db_name=db_name, initial_collection=initial_collection
        )
    except ApiError:
        return _failed("Failed to create database")

    return redirect(databases_url(env_id))


@router.post("/update", response_model=None)
async def ui_databases_update(
    request: Request,
    env_id: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    old_db_name = form_str(form, "oldDbName")
    new_db_name = form_str(form, "newDbName")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            TEMPLATE,
            _page_context(env_id),
            fail(400, error=error, values={"oldDbName": old_db_name, "newDbName": new_db_name}),
        )

    if old_db_name is None or new_db_name is None:
        return _failed("Invalid form data")

    try:
        await client.rename_database(token, env_id, old_db_name, new_db_name=new_db_name)
    except ApiError:
        return _failed("Failed to rename database")

    return redirect(databases_url(env_id))


@router.post("/delete", response_model=None)
async def ui_databases_delete(
    request: Request,
    env_id: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    db_name = form_str(form, "dbName")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            TEMPLATE,
            _page_context(env_id),
            fail(400, error=error, values={"dbName": db_name}),
        )

    if db_name is None:
        return _failed("Invalid database name")

    try:
        await client.delete_database(token, env_id, db_name)
    except ApiError:
        return _failed("Failed to delete database")

    return redirect(databases_url(env_id))
