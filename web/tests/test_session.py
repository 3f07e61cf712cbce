from __future__ import annotations

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from conftest import TOKEN, USER, mock_session


def test_root_redirects_by_session_state(client: TestClient) -> None:
    r = client.get("/")
    assert r.status_code == 303
    assert r.headers["location"] == "/login"

    client.cookies.set("token", TOKEN)
    r2 = client.get("/")
    assert r2.status_code == 303
    assert r2.headers["location"] == "/environments"


def test_login_page_is_public(client: TestClient) -> None:
    r = client.get("/login")
    assert r.status_code == 200
    assert 'name="email"' in r.text
    assert 'name="password"' in r.text


def test_login_sets_http_only_cookie_and_redirects(
    client: TestClient, api: respx.MockRouter
) -> None:
    route = api.post("/login").mock(return_value=httpx.Response(200, json={"token": "jwt-1"}))

    r = client.post("/login", data={"email": "ada@example.com", "password": "pw"})

    assert r.status_code == 303
    assert r.headers["location"] == "/environments"
    cookie = r.headers["set-cookie"]
    assert cookie.startswith("token=jwt-1")
    assert "httponly" in cookie.lower()
    assert "path=/" in cookie.lower()
    assert route.called
    assert client.cookies.get("token") == "jwt-1"


def test_login_rejected_by_api_returns_401(client: TestClient, api: respx.MockRouter) -> None:
    api.post("/login").mock(
        return_value=httpx.Response(401, json={"error": "Invalid email or password"})
    )

    r = client.post("/login", data={"email": "ada@example.com", "password": "wrong"})

    assert r.status_code == 401
    assert "Invalid email or password" in r.text
    assert "set-cookie" not in r.headers
    # The email is kept in the form; the password never is.
    assert 'value="ada@example.com"' in r.text


def test_login_with_missing_field_fails_without_calling_api(
    client: TestClient, api: respx.MockRouter
) -> None:
    route = api.post("/login")

    r = client.post("/login", data={"email": "ada@example.com"})

    assert r.status_code == 400
    assert "Invalid form data" in r.text
    assert not route.called


def test_login_when_api_is_down_returns_502(client: TestClient, api: respx.MockRouter) -> None:
    api.post("/login").mock(side_effect=httpx.ConnectError("connection refused"))

    r = client.post("/login", data={"email": "ada@example.com", "password": "pw"})

    assert r.status_code == 502
    assert "Unable to reach the API" in r.text


def test_logout_deletes_cookie_and_redirects(logged_in: TestClient) -> None:
    r = logged_in.post("/logout")

    assert r.status_code == 303
    assert r.headers["location"] == "/login"
    cookie = r.headers["set-cookie"].lower()
    assert cookie.startswith("token=")
    assert "max-age=0" in cookie
    assert "path=/" in cookie


def test_settings_shows_current_user(logged_in: TestClient, api: respx.MockRouter) -> None:
    mock_session(api)

    r = logged_in.get("/settings")

    assert r.status_code == 200
    assert USER["email"] in r.text
    assert USER["role"] in r.text


def test_settings_redirects_to_login_when_whoami_fails(
    logged_in: TestClient, api: respx.MockRouter
) -> None:
    api.get("/whoami").mock(return_value=httpx.Response(401, json={"error": "expired"}))

    r = logged_in.get("/settings")

    assert r.status_code == 303
    assert r.headers["location"] == "/login"


PROTECTED = [
    ("GET", "/environments"),
    ("POST", "/environments/create"),
    ("POST", "/environments/update"),
    ("POST", "/environments/delete"),
    ("GET", "/environments/1/databases"),
    ("GET", "/environments/1/databases/shop"),
    ("POST", "/environments/1/databases/create"),
    ("POST", "/environments/1/databases/update"),
    ("POST", "/environments/1/databases/delete"),
    ("GET", "/environments/1/databases/shop/collections"),
    ("POST", "/environments/1/databases/shop/collections/create"),
    ("POST", "/environments/1/databases/shop/collections/update"),
    ("POST", "/environments/1/databases/shop/collections/delete"),
    ("GET", "/environments/1/databases/shop/collections/items/documents"),
    ("GET", "/environments/1/databases/shop/collections/items/documents/abc"),
    ("POST", "/environments/1/databases/shop/collections/items/documents/abc"),
    ("GET", "/settings"),
]


@pytest.mark.parametrize(("method", "path"), PROTECTED)
def test_protected_routes_redirect_to_login_without_token(
    client: TestClient, api: respx.MockRouter, method: str, path: str
) -> None:
    r = client.request(method, path, data={"name": "x"} if method == "POST" else None)

    assert r.status_code == 303
    assert r.headers["location"] == "/login"
    assert api.calls.call_count == 0
