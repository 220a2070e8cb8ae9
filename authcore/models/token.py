"""
Domain models for scoped tokens and client credentials.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Scope(str, Enum):
    """Capability tag constraining what an issued token may be used for."""

    EXECUTION = "execution"
    CREATION = "creation"
    READ = "read"
    WRITE = "write"


class ProviderAlias(str, Enum):
    """Stable identifiers for the configured identity backends."""

    STACKSPOT_API = "stackspot-api"
    HASHICORP_VAULT = "hashicorp-vault"
    GITHUB = "github"


def alias_value(alias: ProviderAlias | str) -> str:
    """Return the raw string for an alias given as enum member or plain string."""
    return alias.value if isinstance(alias, ProviderAlias) else str(alias)


class ClientCredential(BaseModel):
    """Long-lived client pair used to bootstrap token generation."""

    client_id: str
    client_secret: str = Field(..., repr=False)


class TokenResponse(BaseModel):
    """Fresh token as returned by an identity provider."""

    access_token: str = Field(..., repr=False)
    expires_in: int = Field(..., description="Lifetime in seconds, relative to issuance.")


class TokenRecord(BaseModel):
    """Cached token persisted under its (scope, alias) key."""

    token: str = Field(..., repr=False)
    expires_at: datetime
    scope: Scope
    alias: str

    @field_validator("expires_at")
    @classmethod
    def _ensure_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def issue(
        cls,
        response: TokenResponse,
        *,
        scope: Scope,
        alias: ProviderAlias | str,
        now: Optional[datetime] = None,
    ) -> "TokenRecord":
        issued_at = now or datetime.now(timezone.utc)
        return cls(
            token=response.access_token,
            expires_at=issued_at + timedelta(seconds=response.expires_in),
            scope=scope,
            alias=alias_value(alias),
        )

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """A record is usable while it holds a token and has not expired."""
        if not self.token:
            return False
        current = now or datetime.now(timezone.utc)
        return current < self.expires_at

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, payload: str) -> "TokenRecord":
        return cls.model_validate_json(payload)


__all__ = [
    "ClientCredential",
    "ProviderAlias",
    "Scope",
    "TokenRecord",
    "TokenResponse",
    "alias_value",
]
