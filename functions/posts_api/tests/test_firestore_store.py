import unittest
from unittest.mock import MagicMock, patch

from google.api_core import exceptions

from posts_api.db import PostRecord
from posts_api.errors import NotFoundError, StoreError
from posts_api.firestore_store import FirestorePostStore
from posts_api.service import PostsService


def _snapshot(doc_id, data=None):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


class FirestorePostStoreTests(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.collection = self.client.collection.return_value
        self.store = FirestorePostStore(self.client, collection="Post")

    def test_uses_configured_collection(self):
        self.client.collection.assert_called_once_with("Post")

    def test_query_all(self):
        self.collection.stream.return_value = [
            _snapshot(
                "k1",
                {"text": "hi", "username": "bob", "avatar": "a", "favorite": True},
            ),
            _snapshot("k2", {"text": "yo", "username": "amy", "avatar": "b"}),
        ]
        self.assertEqual(
            self.store.query_all(),
            [
                ("k1", PostRecord(text="hi", username="bob", avatar="a", favorite=True)),
                ("k2", PostRecord(text="yo", username="amy", avatar="b")),
            ],
        )

    def test_put_new_uses_auto_id(self):
        doc_ref = MagicMock()
        doc_ref.id = "auto-id"
        self.collection.document.return_value = doc_ref

        uid = self.store.put(None, PostRecord(text="hi", username="bob", avatar="a"))

        self.assertEqual(uid, "auto-id")
        self.collection.document.assert_called_once_with()
        doc_ref.set.assert_called_once_with(
            {"text": "hi", "username": "bob", "avatar": "a", "favorite": False}
        )

    def test_get_missing_and_invalid_ids(self):
        self.collection.document.return_value.get.return_value = _snapshot("k")
        self.assertIsNone(self.store.get("k"))
        self.assertIsNone(self.store.get("a/b"))
        self.collection.document.assert_called_once_with("k")

    def test_api_errors_become_store_errors(self):
        self.collection.stream.side_effect = exceptions.ServiceUnavailable("down")
        with self.assertRaises(StoreError):
            self.store.query_all()

    @patch("posts_api.firestore_store.firestore")
    def test_set_favorite_in_transaction(self, mock_firestore):
        mock_firestore.transactional.side_effect = lambda fn: fn
        transaction = self.client.transaction.return_value
        doc_ref = self.collection.document.return_value
        doc_ref.get.return_value = _snapshot(
            "k1", {"text": "hi", "username": "bob", "avatar": "a", "favorite": False}
        )

        PostsService(self.store).set_favorite("k1", True)

        doc_ref.get.assert_called_once_with(transaction=transaction)
        transaction.set.assert_called_once_with(
            doc_ref,
            {"text": "hi", "username": "bob", "avatar": "a", "favorite": True},
        )

    @patch("posts_api.firestore_store.firestore")
    def test_set_favorite_missing(self, mock_firestore):
        mock_firestore.transactional.side_effect = lambda fn: fn
        transaction = self.client.transaction.return_value
        self.collection.document.return_value.get.return_value = _snapshot("k1")

        with self.assertRaises(NotFoundError):
            PostsService(self.store).set_favorite("k1", True)
        transaction.set.assert_not_called()

    @patch("posts_api.firestore_store.firestore")
    def test_exhausted_transaction_retries_become_store_error(self, mock_firestore):
        def _exhausted(fn):
            def _run(transaction):
                raise ValueError("Failed to commit transaction in 5 attempts.")

            return _run

        mock_firestore.transactional.side_effect = _exhausted
        with self.assertRaises(StoreError):
            PostsService(self.store).set_favorite("k1", True)


if __name__ == "__main__":
    unittest.main()
