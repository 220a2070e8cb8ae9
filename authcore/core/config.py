"""
Application configuration models and helpers.

Centralizes settings management so the CLI, the HTTP surface and the token
registry share one configuration surface.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class AuthMode(str, Enum):
    """How this process authenticates; decides the credential store backend."""

    USER = "stackspot_user"
    SERVICE = "stackspot_service"


class StorageType(str, Enum):
    KEYRING = "keyring"
    MEMORY = "memory"


class AuthSettings(BaseSettings):
    """Credential store and request behaviour."""

    model_config = SettingsConfigDict(extra="ignore")

    mode: str = Field(
        AuthMode.USER.value,
        validation_alias="AUTH_MODE",
        description="stackspot_user uses the OS keyring, stackspot_service keeps state in memory.",
    )
    storage_type: Optional[StorageType] = Field(
        None,
        validation_alias="AUTH_STORAGE_TYPE",
        description="Explicit backend override; takes precedence over the mode.",
    )
    keyring_service: str = Field("phengineer", validation_alias="AUTH_KEYRING_SERVICE")
    request_timeout_seconds: float = Field(30.0, validation_alias="AUTH_REQUEST_TIMEOUT")

    @field_validator("storage_type", mode="before")
    @classmethod
    def _blank_storage_type(cls, value: object) -> object:
        """Treat an empty AUTH_STORAGE_TYPE as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value


class StackSpotSettings(BaseSettings):
    """Client-credentials identity endpoint."""

    model_config = SettingsConfigDict(extra="ignore")

    token_url: str = Field(
        "https://idm.stackspot.com/realms/stackspot/protocol/openid-connect/token",
        validation_alias="STACKSPOT_TOKEN_URL",
    )


class VaultSettings(BaseSettings):
    """HashiCorp Vault integration used by the mediated provider."""

    model_config = SettingsConfigDict(extra="ignore")

    default_secret_path: str = Field(
        "secret/data/stackspot", validation_alias="VAULT_DEFAULT_SECRET_PATH"
    )
    aws_auth_mount: str = Field("aws", validation_alias="VAULT_AWS_AUTH_MOUNT")
    iam_server_id: Optional[str] = Field(
        None,
        validation_alias="VAULT_IAM_SERVER_ID",
        description="Value for the X-Vault-AWS-IAM-Server-ID header when the role requires it.",
    )
    region_name: str = Field(
        "us-east-1", validation_alias=AliasChoices("AWS_REGION", "AWS_DEFAULT_REGION")
    )


class GitHubSettings(BaseSettings):
    """GitHub REST API used for static token validation."""

    model_config = SettingsConfigDict(extra="ignore")

    api_url: str = Field("https://api.github.com", validation_alias="GITHUB_API_URL")
    token_env_var: str = Field("GITHUB_TOKEN", validation_alias="GITHUB_TOKEN_ENV")


class AppSettings(BaseSettings):
    """Root settings object for the CLI and the HTTP surface."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    auth: AuthSettings = Field(default_factory=AuthSettings)
    stackspot: StackSpotSettings = Field(default_factory=StackSpotSettings)
    vault: VaultSettings = Field(default_factory=VaultSettings)
    github: GitHubSettings = Field(default_factory=GitHubSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "AuthMode",
    "AuthSettings",
    "GitHubSettings",
    "StackSpotSettings",
    "StorageType",
    "VaultSettings",
    "get_settings",
]
