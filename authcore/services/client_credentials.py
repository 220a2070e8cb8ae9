"""
Storage of the long-lived client id/secret pair used to bootstrap token generation.
"""

from __future__ import annotations

import logging
from typing import Optional

from authcore.clients.storage import CredentialStore
from authcore.core.errors import InvalidInputError, NotConfiguredError, NotFoundError, StoreError
from authcore.models.token import ClientCredential

logger = logging.getLogger(__name__)


class ClientCredentialManager:
    """Owns the client credential pair of one backend namespace."""

    def __init__(self, store: CredentialStore, namespace: str = "stackspot") -> None:
        self._store = store
        self._namespace = namespace

    @property
    def client_id_key(self) -> str:
        return f"{self._namespace}_client_id"

    @property
    def client_secret_key(self) -> str:
        return f"{self._namespace}_client_secret"

    def set_credentials(self, client_id: str, client_secret: str) -> None:
        """
        Persist both halves of the pair.

        Nothing is written when either value is empty. If the secret cannot be
        written, the client id is restored to what it was before the call so a
        half-written pair never remains.
        """
        if not client_id:
            raise InvalidInputError("client_id cannot be empty")
        if not client_secret:
            raise InvalidInputError("client_secret cannot be empty")

        previous_id = self._read_optional(self.client_id_key)

        try:
            self._store.set(self.client_id_key, client_id)
        except StoreError as exc:
            raise StoreError(f"Failed to save client_id: {exc}") from exc

        try:
            self._store.set(self.client_secret_key, client_secret)
        except StoreError as exc:
            self._restore_client_id(previous_id)
            raise StoreError(f"Failed to save client_secret: {exc}") from exc

        logger.info("Stored client credentials for %s", self._namespace)

    def get_credentials(self) -> ClientCredential:
        try:
            client_id = self._store.get(self.client_id_key)
            client_secret = self._store.get(self.client_secret_key)
        except NotFoundError as exc:
            raise NotConfiguredError(
                f"{self._namespace} client credentials are not configured ({exc.key} missing)"
            ) from exc
        return ClientCredential(client_id=client_id, client_secret=client_secret)

    def has_credentials(self) -> bool:
        return self._store.exists(self.client_id_key) and self._store.exists(
            self.client_secret_key
        )

    def delete_credentials(self) -> None:
        """Delete both keys; both deletions are attempted and the first failure is raised."""
        first_error: Optional[StoreError] = None
        for key in (self.client_id_key, self.client_secret_key):
            try:
                self._store.delete(key)
            except StoreError as exc:
                logger.warning("Failed to delete %s: %s", key, exc)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def _read_optional(self, key: str) -> Optional[str]:
        try:
            return self._store.get(key)
        except NotFoundError:
            return None

    def _restore_client_id(self, previous: Optional[str]) -> None:
        try:
            if previous is None:
                self._store.delete(self.client_id_key)
            else:
                self._store.set(self.client_id_key, previous)
        except StoreError as exc:
            logger.error("Could not roll back client_id after failed secret write: %s", exc)


__all__ = ["ClientCredentialManager"]
