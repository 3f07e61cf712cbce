"""Where Monji Web keeps its own files.

The relay stores nothing about users or environments; its home only holds
`config/web.json` and the rotating `logs/web.log`.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

HOME_ENV = "MONJI_HOME"


@dataclass(frozen=True)
class MonjiPaths:
    home: Path

    @property
    def config_dir(self) -> Path:
        return self.home / "config"

    @property
    def logs_dir(self) -> Path:
        return self.home / "logs"

    @property
    def web_config_path(self) -> Path:
        return self.config_dir / "web.json"

    @property
    def log_path(self) -> Path:
        return self.logs_dir / "web.log"


def _platform_data_dir(env: Mapping[str, str]) -> Path:
    if sys.platform.startswith("win"):
        appdata = env.get("LOCALAPPDATA") or env.get("APPDATA")
        return Path(appdata) / "Monji" if appdata else Path.home() / "AppData/Local/Monji"
    if sys.platform == "darwin":
        return Path.home() / "Library/Application Support/Monji"
    xdg_data = env.get("XDG_DATA_HOME")
    return Path(xdg_data) / "monji" if xdg_data else Path.home() / ".local/share/monji"


def resolve_monji_home(environ: Mapping[str, str] | None = None) -> Path:
    """Pick the home directory: `MONJI_HOME` when set, else the platform data dir.

    A relative `MONJI_HOME` is taken under the user's home directory, so the
    result never depends on where the server was started.
    """

    env = os.environ if environ is None else environ
    override = (env.get(HOME_ENV) or "").strip()
    if not override:
        return _platform_data_dir(env).resolve()

    home = Path(override).expanduser()
    return (home if home.is_absolute() else Path.home() / home).resolve()


def ensure_monji_layout(home: Path) -> MonjiPaths:
    paths = MonjiPaths(home=home)
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    paths.logs_dir.mkdir(parents=True, exist_ok=True)
    return paths
