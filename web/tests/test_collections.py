from __future__ import annotations

import json

import httpx
import respx
from fastapi.testclient import TestClient

from conftest import mock_session

BASE = "/environments/1/databases/shop/collections"


def _mock_collections(api: respx.MockRouter) -> respx.Route:
    return api.get(BASE).mock(
        return_value=httpx.Response(
            200,
            json={
                "database": "shop",
                "collections": [
                    {"name": "orders", "count": 12, "size": 2048},
                    {"name": "customers", "count": 3, "size": 512},
                ],
                "myPermission": "readAndWrite",
            },
        )
    )


def test_collections_page_lists_collections(logged_in: TestClient, api: respx.MockRouter) -> None:
    mock_session(api)
    _mock_collections(api)

    r = logged_in.get(BASE)

    assert r.status_code == 200
    assert "orders" in r.text
    assert "customers" in r.text
    assert f"{BASE}/orders/documents" in r.text
    # Navbar environments come from the second read.
    assert "staging" in r.text


def test_collection_links_encode_names_like_redirects(
    logged_in: TestClient, api: respx.MockRouter
) -> None:
    mock_session(api)
    api.get(BASE).mock(
        return_value=httpx.Response(
            200, json={"database": "shop", "collections": [{"name": "q1 sales?"}]}
        )
    )

    r = logged_in.get(BASE)

    assert r.status_code == 200
    assert f"{BASE}/q1%20sales%3F/documents" in r.text


def test_collections_page_falls_back_to_databases(
    logged_in: TestClient, api: respx.MockRouter
) -> None:
    mock_session(api)
    api.get(BASE).mock(return_value=httpx.Response(403, json={"error": "No permission"}))

    r = logged_in.get(BASE)

    assert r.status_code == 303
    assert r.headers["location"] == "/environments/1/databases"


def test_collections_page_needs_valid_session(
    logged_in: TestClient, api: respx.MockRouter
) -> None:
    api.get("/whoami").mock(return_value=httpx.Response(401, json={"error": "Invalid token"}))
    listing = _mock_collections(api)

    r = logged_in.get(BASE)

    assert r.status_code == 303
    assert r.headers["location"] == "/login"
    assert not listing.called


def test_create_collection(logged_in: TestClient, api: respx.MockRouter) -> None:
    route = api.post(BASE).mock(
        return_value=httpx.Response(200, json={"message": "Collection created successfully"})
    )

    r = logged_in.post(f"{BASE}/create", data={"collectionName": "invoices"})

    assert r.status_code == 303
    assert r.headers["location"] == BASE
    assert json.loads(route.calls.last.request.content) == {"collectionName": "invoices"}


def test_create_collection_missing_name(logged_in: TestClient, api: respx.MockRouter) -> None:
    r = logged_in.post(f"{BASE}/create", data={})

    assert r.status_code == 400
    assert "Invalid collection name" in r.text
    assert api.calls.call_count == 0


def test_rename_collection(logged_in: TestClient, api: respx.MockRouter) -> None:
    route = api.put(f"{BASE}/orders").mock(
        return_value=httpx.Response(200, json={"message": "Collection renamed successfully"})
    )

    r = logged_in.post(
        f"{BASE}/update",
        data={"oldCollectionName": "orders", "newCollectionName": "orders_2024"},
    )

    assert r.status_code == 303
    assert r.headers["location"] == BASE
    assert json.loads(route.calls.last.request.content) == {"newCollectionName": "orders_2024"}


def test_rename_collection_api_failure(logged_in: TestClient, api: respx.MockRouter) -> None:
    api.put(f"{BASE}/orders").mock(
        return_value=httpx.Response(500, json={"error": "Failed to rename collection"})
    )

    r = logged_in.post(
        f"{BASE}/update",
        data={"oldCollectionName": "orders", "newCollectionName": "customers"},
    )

    assert r.status_code == 400
    assert "Failed to rename collection" in r.text
    assert "This database has no collections." not in r.text


def test_delete_collection(logged_in: TestClient, api: respx.MockRouter) -> None:
    route = api.delete(f"{BASE}/orders").mock(
        return_value=httpx.Response(200, json={"message": "Collection deleted successfully"})
    )

    r = logged_in.post(f"{BASE}/delete", data={"collectionName": "orders"})

    assert r.status_code == 303
    assert r.headers["location"] == BASE
    assert route.called
