"""Pydantic schemas used by the HTTP surface."""

from .auth import (
    AuthStatusResponse,
    CachedTokenStatus,
    ClientCredentialsPayload,
    GitHubTokenPayload,
    TokenIssueResponse,
    VaultConfigPayload,
)

__all__ = [
    "AuthStatusResponse",
    "CachedTokenStatus",
    "ClientCredentialsPayload",
    "GitHubTokenPayload",
    "TokenIssueResponse",
    "VaultConfigPayload",
]
