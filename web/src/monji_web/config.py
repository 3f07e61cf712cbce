from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from monji_web.home import MonjiPaths


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000, ge=1, le=65535)


class ApiConfig(BaseModel):
    """Where the Monji REST API lives."""

    base_url: str = Field(
        default="http://api:8080",
        min_length=1,
        description="Base URL of the API, e.g. http://localhost:8080 outside docker compose",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout; if omitted, outbound calls wait indefinitely.",
    )


class SessionConfig(BaseModel):
    """Attributes of the `token` cookie. Name, path and HttpOnly are fixed."""

    cookie_secure: bool = Field(default=False)
    cookie_samesite: Literal["lax", "strict", "none"] | None = Field(default="lax")
    cookie_max_age: int | None = Field(
        default=None,
        ge=1,
        description="Cookie lifetime in seconds; if omitted the cookie lasts for the browser session.",
    )


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class WebConfig(BaseModel):
    version: str = Field(default="1")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_web_config(paths: MonjiPaths) -> WebConfig:
    """Load config from ${MONJI_HOME}/config/web.json.

    - If missing: returns defaults.
    - Validation is performed by Pydantic.
    """

    config_path = paths.web_config_path
    if not config_path.exists():
        return WebConfig()

    raw = _read_json(config_path)
    return WebConfig.model_validate(raw)


def apply_env_overrides(config: WebConfig, environ: dict[str, str] | None = None) -> WebConfig:
    """Let MONJI_API_URL point the relay at another API without editing web.json."""

    env = os.environ if environ is None else environ

    api_url = (env.get("MONJI_API_URL") or "").strip()
    if not api_url:
        return config

    updated_api = config.api.model_copy(update={"base_url": api_url})
    return config.model_copy(update={"api": updated_api})
