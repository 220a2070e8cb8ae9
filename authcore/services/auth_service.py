"""
Scope-oriented facade over client credentials and the token cache.
"""

from __future__ import annotations

import logging
from typing import Optional

from authcore.core.errors import AuthCoreError, NotConfiguredError
from authcore.models.token import ProviderAlias, Scope
from authcore.services.client_credentials import ClientCredentialManager
from authcore.services.registry import TokenProvider
from authcore.services.token_cache import TokenCache

logger = logging.getLogger(__name__)


class AuthService:
    """Entry point used by the CLI and HTTP layers."""

    def __init__(
        self,
        credentials: ClientCredentialManager,
        token_cache: TokenCache,
        provider: TokenProvider,
        *,
        alias: ProviderAlias | str = ProviderAlias.STACKSPOT_API,
    ) -> None:
        self._credentials = credentials
        self._cache = token_cache
        self._provider = provider
        self._alias = alias

    def setup_credentials(self, client_id: str, client_secret: str) -> None:
        self._credentials.set_credentials(client_id, client_secret)

    def is_setup(self) -> bool:
        return self._credentials.has_credentials()

    def get_valid_token(self, scope: Scope) -> str:
        """Return a cached or freshly issued token for ``scope``."""
        if not self.is_setup():
            raise NotConfiguredError("credentials not configured")
        return self._cache.get(scope, self._alias, provider=self._provider)

    def get_token_for(self, scope: Scope, alias: ProviderAlias | str) -> str:
        """Return a token for ``scope`` from any registered provider."""
        return self._cache.get(scope, alias)

    def invalidate_token(self, scope: Scope, alias: Optional[ProviderAlias | str] = None) -> None:
        self._cache.delete(scope, alias or self._alias)

    def invalidate_all_tokens(self, alias: Optional[ProviderAlias | str] = None) -> None:
        """Drop the cached token of every scope; every deletion is attempted."""
        first_error: Optional[AuthCoreError] = None
        for scope in Scope:
            try:
                self._cache.delete(scope, alias or self._alias)
            except AuthCoreError as exc:
                logger.warning("Failed to delete token for scope %s: %s", scope.value, exc)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error


__all__ = ["AuthService"]
