"""Logging setup for the bridge.

Each logger category (outbound HTTP, uvicorn, the Discord adapter, the
record store) gets its own level from Settings, so a chatty Discord
debug session does not also flood the log with httpcore traces.

Call ``setup_logging()`` once from the FastAPI lifespan.
"""

import logging
import sys

from app.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Settings field → logger names it controls
LOGGER_CATEGORIES: dict[str, tuple[str, ...]] = {
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_discord": (
        "app.infrastructure.discord",
        "app.presentation.api.v1.endpoints.discord_interactions",
        "app.application.services.password_sync",
    ),
    "log_level_store": (
        "app.infrastructure.storage",
        "app.application.services.reconciler_service",
    ),
}


def level_from_name(name: str) -> int:
    """``"debug"`` → ``logging.DEBUG``; unknown names fall back to INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(level_from_name(settings.log_level))
    # uvicorn installs its own handlers; plain test runs and scripts do not
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    levels = {}
    for field_name, logger_names in LOGGER_CATEGORIES.items():
        level = level_from_name(getattr(settings, field_name))
        levels[field_name] = logging.getLevelName(level)
        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s %s", settings.log_level, levels
    )
