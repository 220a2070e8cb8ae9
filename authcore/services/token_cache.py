"""
Scoped token cache.

Tokens are persisted per (scope, alias) in the credential store and reused
until they expire; a miss, a corrupt entry or an expired entry triggers a call
to the provider registered for the alias.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import ValidationError

from authcore.clients.storage import CredentialStore
from authcore.core.errors import AuthCoreError, NotFoundError, TokenGenerationFailedError
from authcore.models.token import ProviderAlias, Scope, TokenRecord, alias_value
from authcore.services.registry import GeneratorRegistry, TokenProvider

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenCache:
    """Owns the lifecycle of cached token records."""

    def __init__(
        self,
        store: CredentialStore,
        registry: GeneratorRegistry,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._registry = registry
        self._clock = clock

    @staticmethod
    def cache_key(scope: Scope, alias: ProviderAlias | str) -> str:
        return f"token_{Scope(scope).value}_{alias_value(alias)}"

    def get(
        self,
        scope: Scope,
        alias: ProviderAlias | str,
        provider: Optional[TokenProvider] = None,
    ) -> str:
        """
        Return a valid token for ``scope`` issued through ``alias``.

        ``provider`` overrides the registry lookup for this call. Generation
        failures are raised as ``TokenGenerationFailedError`` and leave the
        previous entry in place.
        """
        scope = Scope(scope)
        record = self.peek(scope, alias)
        if record is not None and record.is_valid(self._clock()):
            return record.token
        return self._regenerate(scope, alias, provider)

    def peek(self, scope: Scope, alias: ProviderAlias | str) -> Optional[TokenRecord]:
        """Return the stored record, expired or not, without regenerating."""
        key = self.cache_key(scope, alias)
        try:
            raw = self._store.get(key)
        except NotFoundError:
            return None
        try:
            return TokenRecord.from_json(raw)
        except (ValidationError, ValueError):
            logger.warning("Discarding unreadable cached token at %s", key)
            return None

    def delete(self, scope: Scope, alias: ProviderAlias | str) -> None:
        self._store.delete(self.cache_key(scope, alias))

    def exists(self, scope: Scope, alias: ProviderAlias | str) -> bool:
        return self._store.exists(self.cache_key(scope, alias))

    def _regenerate(
        self,
        scope: Scope,
        alias: ProviderAlias | str,
        provider: Optional[TokenProvider],
    ) -> str:
        alias_name = alias_value(alias)
        generator = provider if provider is not None else self._registry.get(alias_name)

        try:
            response = generator.get_token(scope)
        except AuthCoreError as exc:
            logger.warning(
                "Token generation failed for scope %s via %s: %s",
                scope.value,
                alias_name,
                exc,
            )
            raise TokenGenerationFailedError(scope.value, alias_name, exc) from exc

        record = TokenRecord.issue(response, scope=scope, alias=alias_name, now=self._clock())
        self._store.set(self.cache_key(scope, alias_name), record.to_json())
        logger.info(
            "Issued token for scope %s via %s (expires %s)",
            scope.value,
            alias_name,
            record.expires_at.isoformat(),
        )
        return record.token


__all__ = ["TokenCache"]
