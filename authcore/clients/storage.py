"""
Credential store contract and backend selection.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from authcore.core.config import AuthMode, AuthSettings, StorageType

logger = logging.getLogger(__name__)


@runtime_checkable
class CredentialStore(Protocol):
    """Namespaced string map; knows nothing about tokens or expiry."""

    def set(self, key: str, value: str) -> None:
        ...

    def get(self, key: str) -> str:
        """Return the stored value or raise ``NotFoundError``."""
        ...

    def delete(self, key: str) -> None:
        ...

    def exists(self, key: str) -> bool:
        ...


def resolve_storage_type(mode: str, override: Optional[StorageType] = None) -> StorageType:
    """Pick the backend for an auth mode; an explicit override wins."""
    if override is not None:
        return StorageType(override)
    if mode == AuthMode.SERVICE.value:
        return StorageType.MEMORY
    return StorageType.KEYRING


def build_store(settings: AuthSettings) -> CredentialStore:
    """Construct the credential store for the configured auth mode."""
    from .keyring_store import KeyringStore
    from .memory_store import MemoryStore

    storage_type = resolve_storage_type(settings.mode, settings.storage_type)
    logger.info("Using %s credential store (auth mode %s)", storage_type.value, settings.mode)
    if storage_type is StorageType.MEMORY:
        return MemoryStore()
    return KeyringStore(service_name=settings.keyring_service)


__all__ = ["CredentialStore", "build_store", "resolve_storage_type"]
