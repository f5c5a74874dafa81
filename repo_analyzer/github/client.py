"""Async client for the GitHub REST API.

Only the handful of endpoints the analyzer consumes are wrapped. The client is
constructed once per process and shared by every request.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import httpx

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    """A GitHub API call failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class NotFoundError(GitHubError):
    """The requested repository, user or path does not exist."""

    def __init__(self, message: str):
        super().__init__(message, status=404)


class GitHubClient:
    """Thin wrapper over the GitHub endpoints used for trees, files and profiles."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/vnd.github+json", "User-Agent": "repo-analyzer"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub request failed for {url}: {e}") from e
        if response.status_code == 404:
            raise NotFoundError(f"Not found: {url}")
        if response.is_error:
            message = _error_message(response)
            raise GitHubError(f"GitHub API error {response.status_code} for {url}: {message}", response.status_code)
        return response.json()

    async def get_repo(self, owner: str, repo: str) -> Dict[str, Any]:
        try:
            return await self._get(f"/repos/{owner}/{repo}")
        except NotFoundError:
            raise NotFoundError(f'Repository "{owner}/{repo}" not found') from None

    async def get_contents(self, owner: str, repo: str, path: str = "") -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """Return a directory listing (list) or a single item (dict) for ``path``."""
        return await self._get(f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}")

    async def list_contributors(self, owner: str, repo: str, per_page: int = 10) -> List[Dict[str, Any]]:
        data = await self._get(f"/repos/{owner}/{repo}/contributors", params={"per_page": per_page})
        return data if isinstance(data, list) else []

    async def list_languages(self, owner: str, repo: str) -> Dict[str, int]:
        data = await self._get(f"/repos/{owner}/{repo}/languages")
        return data if isinstance(data, dict) else {}

    async def get_user(self, username: str) -> Dict[str, Any]:
        try:
            return await self._get(f"/users/{username}")
        except NotFoundError:
            raise NotFoundError(f'User "{username}" not found') from None

    async def list_user_repos(self, username: str, sort: str = "updated", per_page: int = 10) -> List[Dict[str, Any]]:
        data = await self._get(f"/users/{username}/repos", params={"sort": sort, "per_page": per_page})
        return data if isinstance(data, list) else []

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text[:200]
