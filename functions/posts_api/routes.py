"""
HTTP routes for the posts API.

Routes are declared as data in ``API_METHODS`` and registered by
``build_router``; the referer guard runs before each of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, Response

from posts_api.dependencies import get_posts_service
from posts_api.guard import require_allowed_referer
from posts_api.schemas import AddPostRequest, Post, PostList, SetFavoriteRequest
from posts_api.service import PostsService


def list_posts(service: PostsService = Depends(get_posts_service)):
    """Returns a list of all the existing posts."""
    return PostList(posts=service.list_posts())


def add_post(
    payload: AddPostRequest, service: PostsService = Depends(get_posts_service)
):
    """Creates a new post, stores it and returns it."""
    return service.add_post(
        text=payload.text, username=payload.username, avatar=payload.avatar
    )


def set_favorite(
    payload: SetFavoriteRequest, service: PostsService = Depends(get_posts_service)
):
    """Changes the favorite status of a post given its uid."""
    service.set_favorite(payload.uid, payload.favorite)
    return Response(status_code=204)


@dataclass(frozen=True)
class ApiMethod:
    name: str
    http_method: str
    path: str
    endpoint: Callable[..., Any]
    response_model: Optional[type] = None
    status_code: int = 200


API_METHODS: tuple[ApiMethod, ...] = (
    ApiMethod("getPosts", "GET", "/posts", list_posts, response_model=PostList),
    ApiMethod("addPost", "POST", "/posts", add_post, response_model=Post),
    ApiMethod("setFavorite", "PUT", "/posts", set_favorite, status_code=204),
)


def build_router(methods: tuple[ApiMethod, ...] = API_METHODS) -> APIRouter:
    router = APIRouter(dependencies=[Depends(require_allowed_referer)])
    for method in methods:
        router.add_api_route(
            method.path,
            method.endpoint,
            methods=[method.http_method],
            name=method.name,
            operation_id=method.name,
            response_model=method.response_model,
            status_code=method.status_code,
        )
    return router
