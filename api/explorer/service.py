"""
Explorer service (orchestration).

Each operation is one upstream GitHub call followed by a write to the
document store:
- fetch_user: full-replace upsert; a storage failure fails the request
- fetch_user_repos: unordered bulk insert; storage failures are only logged
- search_repositories: per-item merge upsert; each item's failure is only logged

The GitHub client and the store are passed in by the caller (see
`dependencies.py`); nothing here holds state between requests.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from core.github import GithubAPIError

from .errors import (
    ExplorerError,
    InternalError,
    InvalidQueryError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from .repository import BulkInsertResult

logger = logging.getLogger(__name__)

USER_REPOS_PAGE_SIZE = 10
USER_REPOS_SORT = "updated"

SEARCH_SORT = "stars"
SEARCH_ORDER = "desc"
SEARCH_RESULT_LIMIT = 5
SEARCH_PERSISTED_FIELDS = (
    "name",
    "full_name",
    "html_url",
    "description",
    "language",
    "stargazers_count",
    "forks_count",
)

# 429 is GitHub's secondary rate limit response.
USER_STATUS_ERRORS: dict[int, type[ExplorerError]] = {
    404: NotFoundError,
    403: RateLimitError,
    429: RateLimitError,
}
SEARCH_STATUS_ERRORS: dict[int, type[ExplorerError]] = {
    403: RateLimitError,
    429: RateLimitError,
    422: InvalidQueryError,
}


class UpstreamClient(Protocol):
    async def get_user(self, username: str) -> dict[str, Any]: ...

    async def list_user_repos(self, username: str, *, per_page: int, sort: str) -> list[dict[str, Any]]: ...

    async def search_repositories(
        self, query: str, *, sort: str, order: str, per_page: int
    ) -> dict[str, Any]: ...


class DocumentStore(Protocol):
    async def upsert_full_replace(self, collection_name: str, key: str, payload: dict[str, Any]) -> dict[str, Any]: ...

    async def bulk_insert_unordered(self, collection_name: str, payloads: list[dict[str, Any]]) -> BulkInsertResult: ...

    async def upsert_merge(self, collection_name: str, key: str, fields: dict[str, Any]) -> None: ...


def _map_upstream_error(
    exc: GithubAPIError,
    *,
    operation: str,
    status_errors: dict[int, type[ExplorerError]],
) -> ExplorerError:
    logger.error("%s_upstream_failed status=%s message=%s", operation, exc.status_code, exc.message)
    return status_errors.get(exc.status_code, InternalError)()


def _require_username(username: str | None) -> str:
    username = (username or "").strip()
    if not username:
        raise ValidationError("Username is required")
    return username


def project_repository(item: dict[str, Any]) -> dict[str, Any]:
    return {name: item.get(name) for name in SEARCH_PERSISTED_FIELDS}


async def fetch_user(username: str | None, *, client: UpstreamClient, store: DocumentStore) -> dict[str, Any]:
    """
    Fetch a GitHub user and store the full profile keyed by `login`.

    Returns the stored document (post-upsert), not the raw upstream payload.
    """
    username = _require_username(username)

    try:
        data = await client.get_user(username)
    except GithubAPIError as exc:
        raise _map_upstream_error(exc, operation="fetch_user", status_errors=USER_STATUS_ERRORS) from exc

    login = data.get("login")
    if not isinstance(login, str) or not login:
        logger.error("fetch_user_missing_login username=%s", username)
        raise InternalError()

    try:
        return await store.upsert_full_replace("users", login, data)
    except Exception as exc:
        logger.exception("fetch_user_persist_failed login=%s", login)
        raise InternalError() from exc


async def fetch_user_repos(
    username: str | None,
    *,
    client: UpstreamClient,
    store: DocumentStore,
) -> list[dict[str, Any]]:
    """
    Fetch the user's most recently updated repositories.

    Storage is best effort: the upstream list is returned whatever happens
    to the insert.
    """
    username = _require_username(username)

    try:
        repos = await client.list_user_repos(
            username,
            per_page=USER_REPOS_PAGE_SIZE,
            sort=USER_REPOS_SORT,
        )
    except GithubAPIError as exc:
        raise _map_upstream_error(exc, operation="fetch_user_repos", status_errors=USER_STATUS_ERRORS) from exc

    if repos:
        try:
            result = await store.bulk_insert_unordered("repos", repos)
        except Exception as exc:
            logger.warning("user_repos_persist_failed username=%s error=%s", username, exc)
        else:
            logger.info("user_repos_persisted username=%s inserted=%s", username, result.inserted)

    return repos


async def search_repositories(
    query: str | None,
    *,
    client: UpstreamClient,
    store: DocumentStore,
) -> dict[str, Any]:
    """
    Search repositories by stars and merge the top results into storage.

    The response carries the raw upstream items; only the
    `SEARCH_PERSISTED_FIELDS` subset of each item is stored.
    """
    query = (query or "").strip()
    if not query:
        raise ValidationError("Search query is required")

    logger.info("search_repositories query=%s", query)
    try:
        data = await client.search_repositories(
            query,
            sort=SEARCH_SORT,
            order=SEARCH_ORDER,
            per_page=SEARCH_RESULT_LIMIT,
        )
    except GithubAPIError as exc:
        raise _map_upstream_error(exc, operation="search_repositories", status_errors=SEARCH_STATUS_ERRORS) from exc

    items: list[dict[str, Any]] = data.get("items") or []
    logger.info("search_repositories_result total_count=%s items=%s", data.get("total_count"), len(items))

    saved: list[str] = []
    for item in items:
        full_name = item.get("full_name")
        if not isinstance(full_name, str) or not full_name:
            logger.warning("search_item_skipped reason=missing_full_name")
            continue
        try:
            await store.upsert_merge("repos", full_name, project_repository(item))
        except Exception as exc:
            logger.error("search_item_persist_failed full_name=%s error=%s", full_name, exc)
            continue
        saved.append(full_name)

    logger.info("search_items_persisted count=%s full_names=%s", len(saved), ",".join(saved))

    return {
        "total_count": data.get("total_count", 0),
        "incomplete_results": bool(data.get("incomplete_results", False)),
        "items": items,
    }
