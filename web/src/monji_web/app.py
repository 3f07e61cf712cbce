from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.staticfiles import StaticFiles

from monji_web import __version__
from monji_web.auth import PageRedirect
from monji_web.client import MonjiApiClient
from monji_web.config import apply_env_overrides, load_web_config
from monji_web.home import ensure_monji_layout, resolve_monji_home
from monji_web.ui.common import STATIC_DIR as UI_STATIC_DIR
from monji_web.ui.common import templates
from monji_web.ui.router import router as ui_router

logger = logging.getLogger(__name__)


def _status_title(status_code: int) -> str:
    if status_code == 401:
        return "Unauthorized"
    if status_code == 403:
        return "Forbidden"
    if status_code == 404:
        return "Not found"
    if status_code == 422:
        return "Invalid request"
    if 400 <= status_code < 500:
        return "Bad request"
    return "Something went wrong"


def _error_page(request: Request, status_code: int, message: str) -> Response:
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "title": f"{_status_title(status_code)} • Monji",
            "hide_nav": True,
            "status_code": status_code,
            "heading": _status_title(status_code),
            "message": message,
        },
        status_code=status_code,
    )


def create_app() -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_monji_home()
        paths = ensure_monji_layout(home)
        config = apply_env_overrides(load_web_config(paths))

        # Configure Logging
        file_handler = RotatingFileHandler(
            paths.log_path,
            maxBytes=config.logging.max_size_mb * 1024 * 1024,
            backupCount=config.logging.backup_count,
            encoding="utf-8",
        )
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        file_handler.setFormatter(formatter)

        # Configure root logger to capture all module logs
        root = logging.getLogger()
        root.setLevel(logging.INFO)
        # Avoid adding duplicate handlers if reloaded
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            root.addHandler(file_handler)
        else:
            file_handler.close()

        logger.info("Monji Web starting up")
        logger.info(f"Logs directory: {paths.logs_dir}")
        logger.info(f"API base URL: {config.api.base_url}")

        app.state.monji_home = home
        app.state.monji_paths = paths
        app.state.monji_config = config
        app.state.api_client = MonjiApiClient(
            config.api.base_url, timeout=config.api.timeout_seconds
        )

        try:
            yield
        finally:
            await app.state.api_client.aclose()

    app = FastAPI(title="Monji Web", version=__version__, lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    @app.exception_handler(PageRedirect)
    async def _page_redirect_handler(request: Request, exc: PageRedirect) -> RedirectResponse:
        return RedirectResponse(url=exc.location, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        return _error_page(request, 422, "Request validation failed")

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> Response:
        return _error_page(request, exc.status_code, str(exc.detail))

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return _error_page(request, exc.status_code, message)

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> Response:
        # Avoid leaking internals to the page; the traceback goes to the log.
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_page(request, 500, "Internal server error")

    if UI_STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(UI_STATIC_DIR)), name="static")
    else:
        logger.warning(
            "UI static directory is missing (%s); /static will not be served",
            UI_STATIC_DIR,
        )
    app.include_router(ui_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
