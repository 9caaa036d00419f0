"""
Posts service: the three operations behind the HTTP routes.
"""

from __future__ import annotations

from posts_api.db import PostRecord, PostStore, PostTransaction
from posts_api.errors import NotFoundError
from posts_api.schemas import Post


def _to_post(uid: str, record: PostRecord) -> Post:
    return Post(uid=uid, **record.as_dict())


class PostsService:
    def __init__(self, store: PostStore):
        self.store = store

    def list_posts(self) -> list[Post]:
        """Return every stored post with its id attached."""
        return [_to_post(uid, record) for uid, record in self.store.query_all()]

    def add_post(self, text: str, username: str, avatar: str) -> Post:
        """Store a new, non-favorite post and return it with its assigned id."""
        record = PostRecord(text=text, username=username, avatar=avatar)
        uid = self.store.put(None, record)
        return _to_post(uid, record)

    def set_favorite(self, uid: str, favorite: bool) -> None:
        """
        Change the favorite flag of a post.

        The read and the write run in one store transaction, so concurrent
        updates of the same post never mix fields.
        """

        def _update(tx: PostTransaction) -> None:
            record = tx.get(uid)
            if record is None:
                raise NotFoundError("post not found")
            record.favorite = favorite
            tx.put(uid, record)

        self.store.run_in_transaction(_update)
