from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A call to the Monji API did not succeed (non-2xx, unreadable body, or unreachable)."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def segment(value: str | int) -> str:
    """Percent-encode one path segment so spaces and reserved characters in names survive."""

    return quote(str(value), safe="")


class MonjiApiClient:
    """Async HTTP client for the Monji REST API.

    One instance is shared by the whole app; every call takes the caller's bearer token.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: Any | None = None,
        content: str | None = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        if content is not None:
            headers["Content-Type"] = "application/json"

        try:
            resp = await self._client.request(
                method, path, headers=headers, json=json, content=content
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc.__class__.__name__)
            raise ApiError(502, "Unable to reach the API") from exc

        if resp.is_error:
            message = _error_message(resp)
            logger.warning("%s %s returned %s: %s", method, path, resp.status_code, message)
            raise ApiError(resp.status_code, message)

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(502, "API returned invalid JSON") from exc

    # --- session -----------------------------------------------------------------

    async def login(self, *, email: str, password: str) -> str:
        data = await self._request("POST", "/login", json={"email": email, "password": password})
        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise ApiError(502, "API login response did not include a token")
        return token

    async def whoami(self, token: str) -> dict[str, Any]:
        return await self._request("GET", "/whoami", token=token)

    # --- environments ------------------------------------------------------------

    async def list_environments(self, token: str) -> dict[str, Any]:
        return await self._request("GET", "/environments", token=token)

    async def get_environment(self, token: str, env_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/environments/{segment(env_id)}", token=token)

    async def create_environment(
        self, token: str, *, name: str, connection_string: str
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/environments",
            token=token,
            json={"name": name, "connection_string": connection_string},
        )

    async def update_environment(
        self, token: str, env_id: str, *, name: str, connection_string: str
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"/environments/{segment(env_id)}",
            token=token,
            json={"name": name, "connection_string": connection_string},
        )

    async def delete_environment(self, token: str, env_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/environments/{segment(env_id)}", token=token)

    # --- databases ---------------------------------------------------------------

    @staticmethod
    def _databases_path(env_id: str) -> str:
        return f"/environments/{segment(env_id)}/databases"

    async def list_databases(self, token: str, env_id: str) -> dict[str, Any]:
        return await self._request("GET", self._databases_path(env_id), token=token)

    async def create_database(
        self, token: str, env_id: str, *, db_name: str, initial_collection: str
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            self._databases_path(env_id),
            token=token,
            json={"dbName": db_name, "initialCollection": initial_collection},
        )

    async def rename_database(
        self, token: str, env_id: str, db_name: str, *, new_db_name: str
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"{self._databases_path(env_id)}/{segment(db_name)}",
            token=token,
            json={"newDbName": new_db_name},
        )

    async def delete_database(self, token: str, env_id: str, db_name: str) -> dict[str, Any]:
        return await self._request(
            "DELETE", f"{self._databases_path(env_id)}/{segment(db_name)}", token=token
        )

    # --- collections -------------------------------------------------------------

    @classmethod
    def _collections_path(cls, env_id: str, db_name: str) -> str:
        return f"{cls._databases_path(env_id)}/{segment(db_name)}/collections"

    async def list_collections(self, token: str, env_id: str, db_name: str) -> dict[str, Any]:
        return await self._request("GET", self._collections_path(env_id, db_name), token=token)

    async def create_collection(
        self, token: str, env_id: str, db_name: str, *, collection_name: str
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            self._collections_path(env_id, db_name),
            token=token,
            json={"collectionName": collection_name},
        )

    async def rename_collection(
        self,
        token: str,
        env_id: str,
        db_name: str,
        collection_name: str,
        *,
        new_collection_name: str,
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"{self._collections_path(env_id, db_name)}/{segment(collection_name)}",
            token=token,
            json={"newCollectionName": new_collection_name},
        )

    async def delete_collection(
        self, token: str, env_id: str, db_name: str, collection_name: str
    ) -> dict[str, Any]:
        return await self._request(
            "DELETE",
            f"{self._collections_path(env_id, db_name)}/{segment(collection_name)}",
            token=token,
        )

    # --- documents ---------------------------------------------------------------

    @classmethod
    def _documents_path(cls, env_id: str, db_name: str, collection_name: str) -> str:
        return f"{cls._collections_path(env_id, db_name)}/{segment(collection_name)}/documents"

    async def list_documents(
        self, token: str, env_id: str, db_name: str, collection_name: str
    ) -> dict[str, Any]:
        return await self._request(
            "GET", self._documents_path(env_id, db_name, collection_name), token=token
        )

    async def get_document(
        self, token: str, env_id: str, db_name: str, collection_name: str, doc_id: str
    ) -> dict[str, Any]:
        path = f"{self._documents_path(env_id, db_name, collection_name)}/{segment(doc_id)}"
        return await self._request("GET", path, token=token)

    async def replace_document(
        self,
        token: str,
        env_id: str,
        db_name: str,
        collection_name: str,
        doc_id: str,
        *,
        raw_json: str,
    ) -> dict[str, Any]:
        """PUT the submitted JSON text verbatim; the caller has already checked it parses."""

        path = f"{self._documents_path(env_id, db_name, collection_name)}/{segment(doc_id)}"
        return await self._request("PUT", path, token=token, content=raw_json)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or f"HTTP {resp.status_code}"
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return resp.reason_phrase or f"HTTP {resp.status_code}"
