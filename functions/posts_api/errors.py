"""
Typed errors raised by the posts service and its stores.

Each error carries the HTTP status it maps to; the application installs a
single handler that renders any of them as ``{"detail": <message>}``.
"""

from __future__ import annotations


class PostsApiError(RuntimeError):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500


class UnauthorizedError(PostsApiError):
    """Raised when the request referer is missing, malformed or not allowed."""

    status_code = 401


class NotFoundError(PostsApiError):
    """Raised when a post id does not resolve to a stored record."""

    status_code = 404


class StoreError(PostsApiError):
    """Raised when the underlying datastore fails."""

    status_code = 500
