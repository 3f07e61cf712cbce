from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from starlette.responses import Response

from monji_web.auth import require_session_token
from monji_web.client import ApiError, MonjiApiClient
from monji_web.models import fail
from monji_web.ui.common import (
    collections_url,
    documents_url,
    fetch_or_redirect,
    form_str,
    get_api_client,
    load_session_context,
    redirect,
    render_failure,
    render_page,
)

router = APIRouter(
    prefix="/environments/{env_id}/databases/{db_name}/collections/{collection_name}/documents",
    tags=["documents"],
)


def _pretty(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def _document_context(
    env_id: str, db_name: str, collection_name: str, doc_id: str
) -> dict[str, Any]:
    # The editor falls back to the submitted text when nothing was loaded.
    return {
        "title": f"{doc_id} • Monji",
        "active": "environments",
        "document": None,
        "document_json": "",
        "database": None,
        "collection": None,
        "current_environment_id": env_id,
        "current_database": db_name,
        "current_collection": collection_name,
        "doc_id": doc_id,
    }


async def load_documents_page(
    client: MonjiApiClient, token: str, env_id: str, db_name: str, collection_name: str
) -> dict[str, Any]:
    ctx = await load_session_context(client, token)
    data = await fetch_or_redirect(
        client.list_documents(token, env_id, db_name, collection_name),
        collections_url(env_id, db_name),
    )
    documents = data.get("documents") or []
    ctx.update(
        {
            "title": f"{collection_name} • Monji",
            "active": "environments",
            "documents": documents,
            "documents_json": [_pretty(d) for d in documents],
            "database": data.get("database"),
            "collection": data.get("collection"),
            "current_environment_id": env_id,
            "current_database": db_name,
            "current_collection": collection_name,
        }
    )
    return ctx


async def load_document_page(
    client: MonjiApiClient,
    token: str,
    env_id: str,
    db_name: str,
    collection_name: str,
    doc_id: str,
) -> dict[str, Any]:
    ctx = _document_context(env_id, db_name, collection_name, doc_id)
    ctx.update(await load_session_context(client, token))
    data = await fetch_or_redirect(
        client.get_document(token, env_id, db_name, collection_name, doc_id),
        documents_url(env_id, db_name, collection_name),
    )
    document = data.get("document")
    ctx.update(
        {
            "document": document,
            "document_json": _pretty(document),
            "database": data.get("database"),
            "collection": data.get("collection"),
        }
    )
    return ctx


@router.get("", response_class=HTMLResponse)
async def ui_documents_list(
    request: Request,
    env_id: str,
    db_name: str,
    collection_name: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    ctx = await load_documents_page(client, token, env_id, db_name, collection_name)
    return render_page(request, "documents.html", ctx)


@router.get("/{doc_id}", response_class=HTMLResponse)
async def ui_document_detail(
    request: Request,
    env_id: str,
    db_name: str,
    collection_name: str,
    doc_id: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    ctx = await load_document_page(client, token, env_id, db_name, collection_name, doc_id)
    return render_page(request, "document.html", ctx)


@router.post("/{doc_id}", response_model=None)
async def ui_document_update(
    request: Request,
    env_id: str,
    db_name: str,
    collection_name: str,
    doc_id: str,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    raw = form_str(form, "document")

    def _failed(error: str) -> Response:
        return render_failure(
            request,
            "document.html",
            _document_context(env_id, db_name, collection_name, doc_id),
            fail(400, error=error, values={"document": raw}),
        )

    if raw is None:
        return _failed("Invalid document data")

    try:
        json.loads(raw)
    except ValueError:
        return _failed("Invalid JSON format")

    try:
        await client.replace_document(
            token, env_id, db_name, collection_name, doc_id, raw_json=raw
        )
    except ApiError:
        return _failed("Failed to update document")

    return redirect(documents_url(env_id, db_name, collection_name))
