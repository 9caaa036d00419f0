"""
Referer-based access guard.

The allowed referer is the appspot domain of the deployment, such as
``my-project-id.appspot.com``. Every referer is accepted in dev mode.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlsplit

from fastapi import Depends, Request

from posts_api.config import Settings, get_settings
from posts_api.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def allowed_host(app_id: str) -> str:
    return f"{app_id}.appspot.com"


def _referer_host(referer: str) -> str:
    """Host and port of the referer URL, without user info."""
    # urlsplit silently drops tabs and newlines, so reject control characters first.
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in referer):
        raise ValueError("control character in referer")
    parts = urlsplit(referer)
    # Raises ValueError on a non-numeric or out of range port.
    parts.port
    return parts.netloc.rpartition("@")[2]


def check_referer(referer: Optional[str], app_id: Optional[str], is_dev: bool) -> None:
    """Raise UnauthorizedError unless the referer is allowed for this deployment."""
    if is_dev:
        return

    referer = referer or ""
    try:
        host = _referer_host(referer)
    except ValueError:
        logger.info("malformed referer detected: %r", referer)
        raise UnauthorizedError("couldn't extract domain from referer")

    if not app_id or host != allowed_host(app_id):
        logger.info("unauthorized referer detected: %r", referer)
        raise UnauthorizedError("referer unauthorized")


def require_allowed_referer(
    request: Request, settings: Settings = Depends(get_settings)
) -> None:
    """FastAPI dependency running the referer check for each request."""
    check_referer(
        request.headers.get("referer"),
        app_id=settings.app_id,
        is_dev=settings.dev_mode,
    )
