"""
Post store abstraction with SQLAlchemy and in-memory implementations.

A store is bound to the ``Post`` kind when constructed. Every store offers
point reads and writes, a full scan, and a transaction primitive that makes
a read-then-write on one id atomic against concurrent writers.
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Protocol, TypeVar

from sqlalchemy import Boolean, Column, Float, String, Text, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from posts_api.errors import StoreError

T = TypeVar("T")


@dataclass
class PostRecord:
    """Stored fields of a post. The id is the record's key, not a field."""

    text: str
    username: str
    avatar: str
    favorite: bool = False

    def as_dict(self) -> dict:
        return {
            "text": self.text,
            "username": self.username,
            "avatar": self.avatar,
            "favorite": self.favorite,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PostRecord":
        return cls(
            text=data.get("text", ""),
            username=data.get("username", ""),
            avatar=data.get("avatar", ""),
            favorite=bool(data.get("favorite", False)),
        )


class PostTransaction(Protocol):
    """Reads and writes available both inside and outside a transaction."""

    def get(self, uid: str) -> Optional[PostRecord]:
        ...

    def put(self, uid: Optional[str], record: PostRecord) -> str:
        ...


class PostStore(PostTransaction, Protocol):
    """Interface for post persistence."""

    def query_all(self) -> list[tuple[str, PostRecord]]:
        ...

    def run_in_transaction(self, fn: Callable[[PostTransaction], T]) -> T:
        ...


class InMemoryPostStore:
    """Dict-backed store for development and tests."""

    def __init__(self):
        self.posts: Dict[str, PostRecord] = {}
        self._lock = threading.RLock()

    def query_all(self) -> list[tuple[str, PostRecord]]:
        with self._lock:
            return [(uid, replace(record)) for uid, record in self.posts.items()]

    def get(self, uid: str) -> Optional[PostRecord]:
        with self._lock:
            record = self.posts.get(uid)
            return replace(record) if record else None

    def put(self, uid: Optional[str], record: PostRecord) -> str:
        with self._lock:
            if uid is None:
                uid = uuid.uuid4().hex
            self.posts[uid] = replace(record)
            return uid

    def run_in_transaction(self, fn: Callable[[PostTransaction], T]) -> T:
        # Writes made by fn are applied directly, so snapshot the store and
        # restore it if fn fails partway.
        with self._lock:
            snapshot = dict(self.posts)
            try:
                return fn(self)
            except Exception:
                self.posts.clear()
                self.posts.update(snapshot)
                raise

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.posts.clear()


class _SessionPostTransaction:
    """Transaction-scoped view over an open SQLAlchemy session."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, uid: str) -> Optional[PostRecord]:
        row = self._session.get(PostRow, uid, with_for_update=True)
        return _to_post_record(row) if row else None

    def put(self, uid: Optional[str], record: PostRecord) -> str:
        return _write_row(self._session, uid, record)


class SqlPostStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlPostStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def query_all(self) -> list[tuple[str, PostRecord]]:
        try:
            with self.Session() as session:
                stmt = select(PostRow).order_by(PostRow.created_at.asc())
                rows = session.execute(stmt).scalars().all()
                return [(row.uid, _to_post_record(row)) for row in rows]
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def get(self, uid: str) -> Optional[PostRecord]:
        try:
            with self.Session() as session:
                row = session.get(PostRow, uid)
                return _to_post_record(row) if row else None
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def put(self, uid: Optional[str], record: PostRecord) -> str:
        try:
            with self.Session.begin() as session:
                return _write_row(session, uid, record)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def run_in_transaction(self, fn: Callable[[PostTransaction], T]) -> T:
        try:
            with self.Session.begin() as session:
                return fn(_SessionPostTransaction(session))
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc


def _to_post_record(row: "PostRow") -> PostRecord:
    return PostRecord(
        text=row.text,
        username=row.username,
        avatar=row.avatar,
        favorite=row.favorite,
    )


def _write_row(session: Session, uid: Optional[str], record: PostRecord) -> str:
    row = session.get(PostRow, uid) if uid is not None else None
    if row:
        row.text = record.text
        row.username = record.username
        row.avatar = record.avatar
        row.favorite = record.favorite
        return row.uid
    row = PostRow(
        uid=uid or uuid.uuid4().hex,
        text=record.text,
        username=record.username,
        avatar=record.avatar,
        favorite=record.favorite,
        created_at=time.time(),
    )
    session.add(row)
    return row.uid


Base = declarative_base()


class PostRow(Base):
    __tablename__ = "posts"

    uid = Column(String, primary_key=True)
    text = Column(Text, nullable=False, default="")
    username = Column(String, nullable=False, default="")
    avatar = Column(String, nullable=False, default="")
    favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(Float, nullable=False, index=True)
