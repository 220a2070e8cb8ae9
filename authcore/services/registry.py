"""
Dispatch table from provider alias to the identity provider that mints its tokens.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Protocol, runtime_checkable

from authcore.clients.storage import CredentialStore
from authcore.core.errors import NoGeneratorRegisteredError
from authcore.models.token import ProviderAlias, Scope, TokenResponse, alias_value

logger = logging.getLogger(__name__)


@runtime_checkable
class TokenProvider(Protocol):
    """Anything able to produce a fresh token for a scope."""

    def get_token(self, scope: Scope) -> TokenResponse:
        ...


class GeneratorRegistry:
    """
    Maps provider aliases to token providers.

    The registry also carries the credential store chosen for the process, so
    everything built from it shares a single backend. It holds no tokens.
    """

    def __init__(self, store: CredentialStore) -> None:
        self._store = store
        self._providers: Dict[str, TokenProvider] = {}

    @property
    def store(self) -> CredentialStore:
        return self._store

    def register(self, alias: ProviderAlias | str, provider: TokenProvider) -> None:
        """Register ``provider`` for ``alias``, replacing any earlier registration."""
        key = alias_value(alias)
        if key in self._providers:
            logger.debug("Replacing token provider for %s", key)
        self._providers[key] = provider

    def get(self, alias: ProviderAlias | str) -> TokenProvider:
        key = alias_value(alias)
        try:
            return self._providers[key]
        except KeyError:
            raise NoGeneratorRegisteredError(key) from None

    def aliases(self) -> List[str]:
        return sorted(self._providers)


__all__ = ["GeneratorRegistry", "TokenProvider"]
