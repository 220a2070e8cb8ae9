"""Schemas for credential setup and token requests."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ClientCredentialsPayload(BaseModel):
    """Client pair submitted by `authcore user` or the setup endpoint."""

    client_id: str = Field("", description="StackSpot client identifier.")
    client_secret: str = Field("", description="StackSpot client secret.", repr=False)


class VaultConfigPayload(BaseModel):
    vault_url: str = Field(..., description="Base URL of the Vault server.")
    aws_role: str = Field(..., description="Vault role bound to the caller's AWS IAM identity.")
    secret_path: str = Field(
        "", description="KV path holding client_id/client_secret; server default when empty."
    )


class GitHubTokenPayload(BaseModel):
    token: str = Field(..., repr=False)


class TokenIssueResponse(BaseModel):
    scope: str
    alias: str
    access_token: str
    token_type: str = "Bearer"


class CachedTokenStatus(BaseModel):
    scope: str
    alias: str
    cached: bool
    expires_at: Optional[datetime] = None
    valid: bool = False


class AuthStatusResponse(BaseModel):
    configured: bool
    auth_mode: str
    providers: List[str]
    tokens: List[CachedTokenStatus] = Field(default_factory=list)


__all__ = [
    "AuthStatusResponse",
    "CachedTokenStatus",
    "ClientCredentialsPayload",
    "GitHubTokenPayload",
    "TokenIssueResponse",
    "VaultConfigPayload",
]
