"""
Explorer API endpoints (GitHub users, repositories, search).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from core.github import GithubClient

from . import service
from .dependencies import get_document_store, get_github_client
from .repository import PostgresDocumentStore
from .schemas import ErrorResponse, SearchRepositoriesResponse

router = APIRouter()

_USER_ERRORS: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}
_SEARCH_ERRORS: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/users/{username}", responses=_USER_ERRORS)
async def get_user(
    username: str,
    client: GithubClient = Depends(get_github_client),
    store: PostgresDocumentStore = Depends(get_document_store),
) -> dict:
    """
    Fetch a user profile from GitHub and return the stored copy.
    """
    return await service.fetch_user(username, client=client, store=store)


@router.get("/users/{username}/repos", responses=_USER_ERRORS)
async def get_user_repos(
    username: str,
    client: GithubClient = Depends(get_github_client),
    store: PostgresDocumentStore = Depends(get_document_store),
) -> list[dict]:
    """
    List the user's most recently updated repositories (raw GitHub payload).
    """
    return await service.fetch_user_repos(username, client=client, store=store)


@router.get(
    "/search/repositories",
    response_model=SearchRepositoriesResponse,
    responses=_SEARCH_ERRORS,
)
async def search_repositories(
    # Optional here so a missing `q` gets the same 400 body as a blank one.
    q: str | None = Query(default=None),
    client: GithubClient = Depends(get_github_client),
    store: PostgresDocumentStore = Depends(get_document_store),
) -> dict:
    return await service.search_repositories(q, client=client, store=store)
