from monji_web.config import WebConfig, load_web_config
from monji_web.home import MonjiPaths, ensure_monji_layout, resolve_monji_home

__version__ = "0.1.0"

__all__ = [
    "MonjiPaths",
    "WebConfig",
    "__version__",
    "ensure_monji_layout",
    "load_web_config",
    "resolve_monji_home",
]
