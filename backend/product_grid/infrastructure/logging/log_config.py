"""Centralized logging configuration.

Per-category levels come from Settings, so the chatty loggers (httpx,
uvicorn access lines, per-cell transitions) can be turned up or down
independently of the root level.

Usage:
    from product_grid.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the FastAPI lifespan or a client entry point
"""

import logging
import sys

from product_grid.config import Settings, get_settings

# Settings field → logger names it controls
_CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_store": (
        "product_grid.infrastructure.store",
        "product_grid.application.services",
    ),
    "log_level_sync": ("product_grid.client", "CellTransitions"),
}

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s — %(message)s"


def setup_logging(settings: Settings | None = None) -> None:
    """Apply root and per-category levels; add a stderr handler if none exists."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))

    # uvicorn installs its own handlers; tests and the client may not
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)

    levels: dict[str, str] = {}
    for settings_field, logger_names in _CATEGORY_MAP.items():
        raw_level = getattr(settings, settings_field, "INFO")
        levels[settings_field] = raw_level
        for name in logger_names:
            logging.getLogger(name).setLevel(_parse_level(raw_level))

    logging.getLogger(__name__).debug(
        "Logging configured — root=%s %s",
        settings.log_level,
        " ".join(f"{k.removeprefix('log_level_')}={v}" for k, v in levels.items()),
    )


def _parse_level(raw: str) -> int:
    """Convert a level name string to a logging constant, defaulting to INFO."""
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
