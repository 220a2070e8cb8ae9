"""
Durable credential store backed by the OS keyring.

Values land in macOS Keychain, Windows Credential Locker or the Linux Secret
Service, all under one fixed service name.
"""

from __future__ import annotations

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from authcore.core.errors import NotFoundError, StoreError


class KeyringStore:
    """Persist secrets in the platform keyring under ``service_name``."""

    def __init__(self, service_name: str = "phengineer") -> None:
        self._service = service_name

    @property
    def service_name(self) -> str:
        return self._service

    def set(self, key: str, value: str) -> None:
        try:
            keyring.set_password(self._service, key, value)
        except KeyringError as exc:
            raise StoreError(f"Failed to write {key} to keyring: {exc}") from exc

    def get(self, key: str) -> str:
        try:
            value = keyring.get_password(self._service, key)
        except KeyringError as exc:
            raise StoreError(f"Failed to read {key} from keyring: {exc}") from exc
        if value is None:
            raise NotFoundError(key)
        return value

    def delete(self, key: str) -> None:
        """Remove ``key``; deleting an absent key is a no-op."""
        try:
            keyring.delete_password(self._service, key)
        except PasswordDeleteError:
            if self.exists(key):
                raise StoreError(f"Failed to delete {key} from keyring") from None
        except KeyringError as exc:
            raise StoreError(f"Failed to delete {key} from keyring: {exc}") from exc

    def exists(self, key: str) -> bool:
        try:
            return keyring.get_password(self._service, key) is not None
        except KeyringError as exc:
            raise StoreError(f"Failed to read {key} from keyring: {exc}") from exc


__all__ = ["KeyringStore"]
