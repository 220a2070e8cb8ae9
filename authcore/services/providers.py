"""
Identity providers.

Each provider turns stored configuration into a fresh token for a scope:

* ``StackSpotProvider`` exchanges a client id/secret directly.
* ``VaultProvider`` logs in to Vault with AWS IAM, reads the client pair from a
  secret and hands it to ``StackSpotProvider`` in memory.
* ``GitHubProvider`` checks that a pre-issued token is still accepted.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from authcore.clients.github import GitHubClient, GitHubUser
from authcore.clients.stackspot_idm import StackSpotIdentityClient
from authcore.clients.storage import CredentialStore
from authcore.clients.vault import VaultClient
from authcore.core.errors import (
    InvalidInputError,
    NotConfiguredError,
    NotFoundError,
    SecretFetchFailedError,
)
from authcore.models.token import ClientCredential, Scope, TokenResponse
from authcore.services.client_credentials import ClientCredentialManager

logger = logging.getLogger(__name__)

VAULT_URL_KEY = "vault_url"
VAULT_ROLE_KEY = "vault_aws_role"
VAULT_PATH_KEY = "vault_stackspot_path"
GITHUB_TOKEN_KEY = "github_token"

# GitHub personal access tokens carry no expiry of their own.
STATIC_TOKEN_TTL_SECONDS = 86400 * 365

_STACKSPOT_SCOPES: Dict[Scope, str] = {
    Scope.EXECUTION: "execution",
    Scope.CREATION: "creation",
    Scope.READ: "read",
    Scope.WRITE: "write",
}


class StackSpotProvider:
    """Client-credentials exchange against StackSpot IDM."""

    def __init__(
        self,
        identity_client: StackSpotIdentityClient,
        credentials: ClientCredentialManager,
    ) -> None:
        self._client = identity_client
        self._credentials = credentials

    @staticmethod
    def map_scope(scope: Scope | str) -> str:
        """Translate an internal scope; unknown scopes map to an empty string."""
        try:
            return _STACKSPOT_SCOPES.get(Scope(scope), "")
        except ValueError:
            return ""

    def get_token(self, scope: Scope) -> TokenResponse:
        return self.exchange(self._credentials.get_credentials(), scope)

    def exchange(self, credential: ClientCredential, scope: Scope) -> TokenResponse:
        """Issue a token using an explicitly supplied client pair."""
        return self._client.exchange_client_credentials(
            credential.client_id,
            credential.client_secret,
            self.map_scope(scope),
        )

    def save_credentials(self, client_id: str, client_secret: str) -> None:
        self._credentials.set_credentials(client_id, client_secret)


class VaultProvider:
    """Vault-mediated provider: AWS IAM login, secret read, then StackSpot exchange."""

    def __init__(
        self,
        store: CredentialStore,
        vault_client: VaultClient,
        stackspot: StackSpotProvider,
        *,
        default_secret_path: str = "secret/data/stackspot",
    ) -> None:
        self._store = store
        self._vault = vault_client
        self._stackspot = stackspot
        self._default_path = default_secret_path

    def get_token(self, scope: Scope) -> TokenResponse:
        vault_url = self._require(VAULT_URL_KEY)
        role = self._require(VAULT_ROLE_KEY)
        secret_path = self._optional(VAULT_PATH_KEY) or self._default_path

        vault_token = self._vault.aws_login(vault_url, role)
        secret = self._vault.read_secret(vault_url, secret_path, vault_token)

        client_id = secret.get("client_id")
        client_secret = secret.get("client_secret")
        if not isinstance(client_id, str) or not isinstance(client_secret, str) or not (
            client_id and client_secret
        ):
            raise SecretFetchFailedError(
                f"Secret {secret_path} does not contain client_id and client_secret."
            )

        logger.debug("Fetched StackSpot client pair from Vault secret %s", secret_path)
        return self._stackspot.exchange(
            ClientCredential(client_id=client_id, client_secret=client_secret), scope
        )

    def save_config(self, vault_url: str, aws_role: str, secret_path: str = "") -> None:
        if not vault_url:
            raise InvalidInputError("vault_url cannot be empty")
        if not aws_role:
            raise InvalidInputError("aws_role cannot be empty")
        self._store.set(VAULT_URL_KEY, vault_url)
        self._store.set(VAULT_ROLE_KEY, aws_role)
        if secret_path:
            self._store.set(VAULT_PATH_KEY, secret_path)

    def is_configured(self) -> bool:
        return self._store.exists(VAULT_URL_KEY) and self._store.exists(VAULT_ROLE_KEY)

    def _require(self, key: str) -> str:
        try:
            return self._store.get(key)
        except NotFoundError as exc:
            raise NotConfiguredError(
                f"Vault is not configured ({key} missing)",
                setup_command="authcore vault --url ... --role ...",
            ) from exc

    def _optional(self, key: str) -> Optional[str]:
        try:
            return self._store.get(key)
        except NotFoundError:
            return None


class GitHubProvider:
    """Static personal access token, validated on every issuance."""

    def __init__(
        self,
        store: CredentialStore,
        github_client: GitHubClient,
        *,
        token_env_var: str = "GITHUB_TOKEN",
    ) -> None:
        self._store = store
        self._github = github_client
        self._env_var = token_env_var

    def get_token(self, scope: Scope) -> TokenResponse:
        token = self._load_token()
        self._github.validate_token(token)
        return TokenResponse(access_token=token, expires_in=STATIC_TOKEN_TTL_SECONDS)

    def get_user(self) -> GitHubUser:
        return self._github.get_user(self._load_token())

    def list_repositories(self) -> List[Dict[str, Any]]:
        return self._github.list_repositories(self._load_token())

    def save_token(self, token: str) -> None:
        """Validate ``token`` against GitHub before storing it."""
        if not token:
            raise InvalidInputError("github token cannot be empty")
        self._github.validate_token(token)
        self._store.set(GITHUB_TOKEN_KEY, token)

    def _load_token(self) -> str:
        try:
            return self._store.get(GITHUB_TOKEN_KEY)
        except NotFoundError as exc:
            token = os.environ.get(self._env_var, "")
            if not token:
                raise NotConfiguredError(
                    f"github_token not found in store and {self._env_var} is not set",
                    setup_command="authcore github --token ...",
                ) from exc
            return token


__all__ = [
    "GITHUB_TOKEN_KEY",
    "GitHubProvider",
    "STATIC_TOKEN_TTL_SECONDS",
    "StackSpotProvider",
    "VAULT_PATH_KEY",
    "VAULT_ROLE_KEY",
    "VAULT_URL_KEY",
    "VaultProvider",
]
