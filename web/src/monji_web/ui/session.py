from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from monji_web.auth import (
    LOGIN_PATH,
    clear_session_cookie,
    get_session_token,
    require_session_token,
    set_session_cookie,
)
from monji_web.client import ApiError, MonjiApiClient
from monji_web.models import fail
from monji_web.ui.common import (
    fetch_or_redirect,
    form_str,
    get_api_client,
    redirect,
    render_page,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["session"])

LOGIN_TEMPLATE = "login.html"


@router.get("/")
async def ui_root(request: Request) -> RedirectResponse:
    if get_session_token(request):
        return redirect("/environments")
    return redirect(LOGIN_PATH)


@router.get("/login", response_class=HTMLResponse)
async def ui_login(request: Request) -> Response:
    return render_page(request, LOGIN_TEMPLATE, {"title": "Login • Monji", "hide_nav": True})


@router.post("/login", response_model=None)
async def ui_login_post(
    request: Request,
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    form = await request.form()
    email = form_str(form, "email")
    password = form_str(form, "password")
    ctx = {"title": "Login • Monji", "hide_nav": True}

    if email is None or password is None:
        return render_page(request, LOGIN_TEMPLATE, ctx, form=fail(400, error="Invalid form data"))

    try:
        token = await client.login(email=email, password=password)
    except ApiError as exc:
        if exc.status_code == 502:
            failure = fail(502, error="Unable to reach the API", values={"email": email})
        else:
            failure = fail(401, error="Invalid email or password", values={"email": email})
        return render_page(request, LOGIN_TEMPLATE, ctx, form=failure)

    logger.info("Login succeeded")
    resp = redirect("/environments")
    set_session_cookie(resp, token, request.app.state.monji_config.session)
    return resp


@router.post("/logout")
async def ui_logout() -> RedirectResponse:
    resp = redirect(LOGIN_PATH)
    clear_session_cookie(resp)
    return resp


@router.get("/settings", response_class=HTMLResponse)
async def ui_settings(
    request: Request,
    token: str = Depends(require_session_token),
    client: MonjiApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    data = await fetch_or_redirect(client.whoami(token), LOGIN_PATH)
    return render_page(
        request,
        "settings.html",
        {
            "title": "Settings • Monji",
            "active": "settings",
            "user": data.get("user"),
            "permissions": data.get("permissions"),
            "environments": [],
        },
    )
