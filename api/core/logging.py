"""
Process-wide logging setup (stdlib `logging`).

Modules log through `logging.getLogger(__name__)` using
`event_name key=value` messages.
"""

from __future__ import annotations

import logging

from . import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name)
    # getLevelName returns a string for unknown names (e.g. LOG_LEVEL=verbose).
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str | None = None) -> None:
    global _configured
    if _configured:
        return None

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level or settings.log_level()))
    _configured = True
