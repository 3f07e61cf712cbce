from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

import uvicorn

from monji_web.app import create_app
from monji_web.config import apply_env_overrides, load_web_config
from monji_web.home import ensure_monji_layout, resolve_monji_home


def main() -> None:
    home = resolve_monji_home()
    paths = ensure_monji_layout(home)

    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            RotatingFileHandler(paths.log_path, maxBytes=10 * 1024 * 1024, backupCount=5),
            logging.StreamHandler(),
        ],
    )

    config = apply_env_overrides(load_web_config(paths))

    host = os.environ.get("MONJI_BIND") or config.network.bind_host

    env_port = os.environ.get("MONJI_PORT")
    port = int(env_port) if env_port else config.network.port

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
