from __future__ import annotations

from typing import Final

from fastapi import Request
from starlette.responses import Response

from monji_web.config import SessionConfig

TOKEN_COOKIE: Final[str] = "token"
COOKIE_PATH: Final[str] = "/"
LOGIN_PATH: Final[str] = "/login"


class PageRedirect(Exception):
    """Abort the current page or action and send the browser elsewhere."""

    def __init__(self, location: str, status_code: int = 303) -> None:
        super().__init__(location)
        self.location = location
        self.status_code = status_code


def get_session_token(request: Request) -> str | None:
    token = request.cookies.get(TOKEN_COOKIE)
    if token:
        return token
    return None


def require_session_token(request: Request) -> str:
    """Route dependency: return the bearer token or redirect to the login page.

    Declared on every protected route, so no outbound call happens without a token.
    """

    token = get_session_token(request)
    if not token:
        raise PageRedirect(LOGIN_PATH)
    return token


def set_session_cookie(response: Response, token: str, session: SessionConfig) -> None:
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        path=COOKIE_PATH,
        httponly=True,
        secure=session.cookie_secure,
        samesite=session.cookie_samesite,
        max_age=session.cookie_max_age,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(TOKEN_COOKIE, path=COOKIE_PATH)
