from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
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

router = APIRouter(
    prefix="/environments/{env_id}/databases/{db_name}/collections", tags=["collections"]
)

TEMPLATE = "collections.html"


def _page_context(env_id: str, db_name: str) -> dict[str, Any]:
    return {
        "title": f"{db_name} • Monji",
        "active": "environments",
        "collections": [],
        "database": None,
        "current_environment_id": env_id,
        "current_database": db_name,
    }


async def load_collections_page(
    client: MonjiApiClient, token: str, env_id: str, db_name: str
) -> dict[str, Any]:
    ctx = _page_context(env_id, db_name)
    ctx.update(await load_session_context(client, token))
    data = await fetch_or_redirect(
        client.list_collections(token, env_id, db_name), databases_url(env_id)
    )
    ctx["collections"] = data.get("collections") or []
    ctx["database"] = data.get("database")
    return ctx


@router.get("", response_class=HTMLResponse)
async def ui_collections_list(
    request: Request,
    env_id: str,
    db_name: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    ctx = await load_collections_page(client, token, env_id, db_name)
    return render_page(request, TEMPLATE, ctx)


@router.post("/create", response_model=None)
async def ui_collections_create(
    request: Request,
    env_id: str,
    db_name: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    collection_name = form_str(form, "collectionName")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            TEMPLATE,
            _page_context(env_id, db_name),
            fail(400, error=error, values={"collectionName": collection_name}),
        )

    if collection_name is None:
        return _failed("Invalid collection name")

    try:
        await client.create_collection(token, env_id, db_name, collection_name=collection_name)
    except ApiError:
        return _failed("Failed to create collection")

    return redirect(collections_url(env_id, db_name))


@router.post("/update", response_model=None)
async def ui_collections_update(
    request: Request,
    env_id: str,
    db_name: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    old_name = form_str(form, "oldCollectionName")
    new_name = form_str(form, "newCollectionName")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            TEMPLATE,
            _page_context(env_id, db_name),
            fail(
                400,
                error=error,
                values={"oldCollectionName": old_name, "newCollectionName": new_name},
            ),
        )

    if old_name is None or new_name is None:
        return _failed("Invalid form data")

    try:
        await client.rename_collection(
            token, env_id, db_name, old_name, new_collection_name=new_name
        )
    except ApiError:
        return _failed("Failed to rename collection")

    return redirect(collections_url(env_id, db_name))


@router.post("/delete", response_model=None)
async def ui_collections_delete(
    request: Request,
    env_id: str,
    db_name: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    collection_name = form_str(form, "collectionName")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            TEMPLATE,
            _page_context(env_id, db_name),
            fail(400, error=error, values={"collectionName": collection_name}),
        )

    if collection_name is None:
        return _failed("Invalid collection name")

    try:
        await client.delete_collection(token, env_id, db_name, collection_name)
    except ApiError:
        return _failed("Failed to delete collection")

    return redirect(collections_url(env_id, db_name))
