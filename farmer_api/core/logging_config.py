"""Root logger configuration."""

from __future__ import annotations

import logging
import sys

from .config import get_settings

_configured = False


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once; later calls are no-ops."""
    global _configured
    if _configured:
        return
    numeric_level = getattr(logging, (level or get_settings().log_level).upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.setLevel(numeric_level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
