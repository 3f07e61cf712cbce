from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from monji_web.app import create_app

API_URL = "http://api.test"
TOKEN = "test-token"

USER = {
    "id": 1,
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "role": "admin",
}

ENVIRONMENTS = [
    {"id": 1, "name": "staging", "connection_string": "mongodb://****@staging:27017"},
    {"id": 2, "name": "prod", "connection_string": "mongodb://****@prod:27017"},
]


@pytest.fixture
def api() -> Iterator[respx.MockRouter]:
    with respx.mock(base_url=API_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def client(tmp_path: Path, monkeypatch, api: respx.MockRouter) -> Iterator[TestClient]:
    monkeypatch.setenv("MONJI_HOME", str(tmp_path))
    monkeypatch.setenv("MONJI_API_URL", API_URL)

    with TestClient(create_app(), follow_redirects=False) as c:
        yield c


@pytest.fixture
def logged_in(client: TestClient) -> TestClient:
    client.cookies.set("token", TOKEN)
    return client


def mock_session(
    api: respx.MockRouter,
    *,
    user: dict[str, Any] | None = None,
    environments: list[dict[str, Any]] | None = None,
) -> None:
    """Answer the whoami + environment-list calls every page makes first."""

    api.get("/whoami").mock(
        return_value=httpx.Response(200, json={"user": user or USER, "permissions": {}})
    )
    api.get("/environments").mock(
        return_value=httpx.Response(
            200, json={"environments": ENVIRONMENTS if environments is None else environments}
        )
    )
