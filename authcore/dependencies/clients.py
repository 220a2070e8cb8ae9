"""
Factory functions providing the shared registry, cache and facade.

The registry is built once per process; everything else is derived from it and
passed along explicitly.
"""

import threading
from functools import lru_cache
from typing import Optional, cast

from authcore.core.config import get_settings
from authcore.models.token import ProviderAlias
from authcore.services import (
    AuthService,
    GeneratorRegistry,
    GitHubProvider,
    TokenCache,
    VaultProvider,
    build_auth_service,
    build_generator_registry,
)

_registry: Optional[GeneratorRegistry] = None
_registry_lock = threading.Lock()


def get_generator_registry() -> GeneratorRegistry:
    """Return the process-wide registry, constructing it on first use."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = build_generator_registry(get_settings())
    return _registry


def reset_generator_registry() -> None:
    """Forget the process-wide registry and every object derived from it."""
    global _registry
    with _registry_lock:
        _registry = None
    get_token_cache.cache_clear()
    get_auth_service.cache_clear()


@lru_cache()
def get_token_cache() -> TokenCache:
    """Provide the token cache bound to the registry's store."""
    registry = get_generator_registry()
    return TokenCache(registry.store, registry)


def get_vault_provider() -> VaultProvider:
    return cast(VaultProvider, get_generator_registry().get(ProviderAlias.HASHICORP_VAULT))


def get_github_provider() -> GitHubProvider:
    return cast(GitHubProvider, get_generator_registry().get(ProviderAlias.GITHUB))


@lru_cache()
def get_auth_service() -> AuthService:
    """Provide the scope-oriented facade."""
    return build_auth_service(get_generator_registry(), token_cache=get_token_cache())


__all__ = [
    "get_auth_service",
    "get_generator_registry",
    "get_github_provider",
    "get_token_cache",
    "get_vault_provider",
    "reset_generator_registry",
]
