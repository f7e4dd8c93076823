"""
GitHub REST API client.

Used endpoints:
- GET /users/{username}          -> {"login": "...", "id": 1, ...}
- GET /users/{username}/repos    -> [{"full_name": "...", ...}, ...]
- GET /search/repositories       -> {"total_count": N, "incomplete_results": false, "items": [...]}

One `GithubClient` (and its keep-alive `httpx.AsyncClient`) is created at
startup and shared by all requests. There is no retry logic here; callers
get the upstream status code and decide what it means.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from . import settings

GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "github-explorer-api"

logger = logging.getLogger(__name__)


# GitHub failures are explicit and separable from other runtime errors.
class GithubAPIError(RuntimeError):
    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _default_headers(token: str) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
        "User-Agent": USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    # Avoid dumping huge bodies; include a small snippet.
    return resp.text[:500]


class GithubClient:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        token: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.github_api_url(),
            headers=_default_headers(settings.github_token() if token is None else token),
            timeout=timeout_s if timeout_s is not None else settings.github_timeout_s(),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        try:
            resp = await self._http.get(path, params=params)
        except httpx.HTTPError as exc:
            raise GithubAPIError(None, f"GitHub request failed: {exc}") from exc

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning("github_request_failed path=%s status=%s message=%s", path, resp.status_code, message)
            raise GithubAPIError(resp.status_code, message)

        try:
            return resp.json()
        except ValueError as exc:
            raise GithubAPIError(resp.status_code, "GitHub returned a non-JSON body.") from exc

    async def get_user(self, username: str) -> dict[str, Any]:
        data = await self._get(f"/users/{quote(username, safe='')}")
        if not isinstance(data, dict):
            raise GithubAPIError(200, "GitHub returned an unexpected user payload.")
        return data

    async def list_user_repos(
        self,
        username: str,
        *,
        per_page: int,
        sort: str,
    ) -> list[dict[str, Any]]:
        data = await self._get(
            f"/users/{quote(username, safe='')}/repos",
            params={"per_page": per_page, "sort": sort},
        )
        if not isinstance(data, list):
            raise GithubAPIError(200, "GitHub returned an unexpected repository list.")
        return data

    async def search_repositories(
        self,
        query: str,
        *,
        sort: str,
        order: str,
        per_page: int,
    ) -> dict[str, Any]:
        data = await self._get(
            "/search/repositories",
            params={"q": query, "sort": sort, "order": order, "per_page": per_page},
        )
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            raise GithubAPIError(200, "GitHub returned an unexpected search payload.")
        return data
