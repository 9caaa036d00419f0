"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
import threading

from fastapi import Depends

from posts_api.config import Settings, get_settings
from posts_api.db import InMemoryPostStore, PostStore, SqlPostStore
from posts_api.service import PostsService

logger = logging.getLogger(__name__)

_post_store: PostStore | None = None
_post_store_lock = threading.Lock()


def _create_firestore_store(collection: str) -> PostStore:
    import firebase_admin
    from firebase_admin import firestore

    from posts_api.firestore_store import FirestorePostStore

    try:
        firebase_admin.get_app()
    except ValueError:
        firebase_admin.initialize_app()
    return FirestorePostStore(firestore.client(), collection=collection)


def get_post_store(settings: Settings = Depends(get_settings)) -> PostStore:
    """
    Return a singleton post store so posts persist across requests.

    The backend is picked from the settings of the first call.
    """
    global _post_store
    with _post_store_lock:
        if _post_store:
            return _post_store

        if settings.use_in_memory_backends:
            _post_store = InMemoryPostStore()
        elif settings.use_firestore:
            _post_store = _create_firestore_store(settings.firestore_collection)
        elif settings.database_url:
            _post_store = SqlPostStore(settings.database_url)
        else:
            _post_store = InMemoryPostStore()
        logger.info("Post store: %s", _post_store.__class__.__name__)
        return _post_store


def get_posts_service(store: PostStore = Depends(get_post_store)) -> PostsService:
    return PostsService(store)
