"""Expose dependency helpers for the CLI and FastAPI routers."""

from .clients import (
    get_auth_service,
    get_generator_registry,
    get_github_provider,
    get_token_cache,
    get_vault_provider,
    reset_generator_registry,
)
from .config import get_app_settings

__all__ = [
    "get_app_settings",
    "get_auth_service",
    "get_generator_registry",
    "get_github_provider",
    "get_token_cache",
    "get_vault_provider",
    "reset_generator_registry",
]
