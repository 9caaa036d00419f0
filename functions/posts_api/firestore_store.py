"""
Firestore-backed post store.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from firebase_admin import firestore
from google.api_core import exceptions

from posts_api.db import PostRecord, PostTransaction
from posts_api.errors import StoreError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _is_valid_document_id(uid: str) -> bool:
    return bool(uid) and "/" not in uid


class _FirestorePostTransaction:
    """Transaction-scoped view; reads go through the transaction, writes are buffered."""

    def __init__(self, collection, transaction):
        self._collection = collection
        self._transaction = transaction

    def get(self, uid: str) -> Optional[PostRecord]:
        if not _is_valid_document_id(uid):
            return None
        doc = self._collection.document(uid).get(transaction=self._transaction)
        if not doc.exists:
            return None
        return PostRecord.from_dict(doc.to_dict())

    def put(self, uid: Optional[str], record: PostRecord) -> str:
        doc_ref = (
            self._collection.document(uid)
            if uid is not None
            else self._collection.document()
        )
        self._transaction.set(doc_ref, record.as_dict())
        return doc_ref.id


class FirestorePostStore:
    """Stores each post as a document in one Firestore collection."""

    def __init__(self, client, collection: str = "Post"):
        self._client = client
        self._collection = client.collection(collection)

    def query_all(self) -> list[tuple[str, PostRecord]]:
        try:
            return [
                (doc.id, PostRecord.from_dict(doc.to_dict()))
                for doc in self._collection.stream()
            ]
        except exceptions.GoogleAPICallError as exc:
            raise StoreError(str(exc)) from exc

    def get(self, uid: str) -> Optional[PostRecord]:
        if not _is_valid_document_id(uid):
            return None
        try:
            doc = self._collection.document(uid).get()
        except exceptions.GoogleAPICallError as exc:
            raise StoreError(str(exc)) from exc
        if not doc.exists:
            return None
        return PostRecord.from_dict(doc.to_dict())

    def put(self, uid: Optional[str], record: PostRecord) -> str:
        doc_ref = (
            self._collection.document(uid)
            if uid is not None
            else self._collection.document()
        )
        try:
            doc_ref.set(record.as_dict())
        except exceptions.GoogleAPICallError as exc:
            raise StoreError(str(exc)) from exc
        return doc_ref.id

    def run_in_transaction(self, fn: Callable[[PostTransaction], T]) -> T:
        """
        Runs fn inside a Firestore transaction.

        Firestore retries fn on contention, so fn must not have side effects
        outside the transaction view it receives.
        """
        transaction = self._client.transaction()

        @firestore.transactional
        def _run(transaction):
            return fn(_FirestorePostTransaction(self._collection, transaction))

        try:
            return _run(transaction)
        except (exceptions.GoogleAPICallError, ValueError) as exc:
            # ValueError is raised once contention retries are exhausted.
            logger.warning("Firestore transaction failed: %s", exc)
            raise StoreError(str(exc)) from exc
