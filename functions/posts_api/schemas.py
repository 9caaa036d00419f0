"""
Pydantic schemas for the posts API.
"""

from __future__ import annotations

from pydantic import BaseModel


class Post(BaseModel):
    uid: str
    text: str
    username: str
    avatar: str
    favorite: bool = False


class PostList(BaseModel):
    posts: list[Post]


class AddPostRequest(BaseModel):
    text: str
    username: str
    avatar: str


class SetFavoriteRequest(BaseModel):
    uid: str
    favorite: bool
