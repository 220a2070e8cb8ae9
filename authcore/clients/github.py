"""GitHub REST client used to check that a static token is still accepted."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from authcore.core.config import GitHubSettings
from authcore.core.errors import InvalidTokenError, ProviderError


class GitHubUser(BaseModel):
    login: str
    id: int
    name: Optional[str] = None
    email: Optional[str] = None


class GitHubClient:
    def __init__(
        self,
        settings: GitHubSettings,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._transport = transport

    def _get(self, path: str, token: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = f"{self._settings.api_url.rstrip('/')}{path}"
        headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
        }
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                return client.get(url, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise InvalidTokenError(f"GitHub request failed: {exc}", transient=True) from exc

    def get_user(self, token: str) -> GitHubUser:
        """Call ``GET /user``; any non-200 answer means the token is not usable."""
        response = self._get("/user", token)
        if response.status_code != HTTPStatus.OK:
            raise InvalidTokenError(
                f"GitHub token rejected: status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return GitHubUser.model_validate(response.json())
        except ValueError as exc:
            raise InvalidTokenError("GitHub returned an unexpected user payload.") from exc

    def validate_token(self, token: str) -> None:
        self.get_user(token)

    def list_repositories(self, token: str) -> List[Dict[str, Any]]:
        """Repositories of the token owner, most recently updated first (one page of 100)."""
        response = self._get("/user/repos", token, params={"sort": "updated", "per_page": 100})
        if response.status_code in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
            raise InvalidTokenError(
                f"GitHub token rejected: status {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code != HTTPStatus.OK:
            raise ProviderError(
                f"Failed to list repositories: status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            repos = response.json()
        except ValueError as exc:
            raise ProviderError("GitHub returned a non-JSON repository list.") from exc
        if not isinstance(repos, list):
            raise ProviderError("GitHub returned an unexpected repository list.")
        return repos


__all__ = ["GitHubClient", "GitHubUser"]
