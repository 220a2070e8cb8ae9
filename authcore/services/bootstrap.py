"""
Construct the generator registry and everything hanging off it.
"""

from __future__ import annotations

from typing import Optional

import httpx

from authcore.clients import GitHubClient, StackSpotIdentityClient, VaultClient, build_store
from authcore.clients.storage import CredentialStore
from authcore.core.config import AppSettings
from authcore.models.token import ProviderAlias
from authcore.services.auth_service import AuthService
from authcore.services.client_credentials import ClientCredentialManager
from authcore.services.providers import GitHubProvider, StackSpotProvider, VaultProvider
from authcore.services.registry import GeneratorRegistry
from authcore.services.token_cache import TokenCache


def build_generator_registry(
    settings: AppSettings,
    *,
    store: Optional[CredentialStore] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> GeneratorRegistry:
    """
    Select the credential store for the auth mode and register all providers.

    ``store`` and ``transport`` let callers substitute the backend and the
    network (tests, embedded use).
    """
    registry = GeneratorRegistry(store if store is not None else build_store(settings.auth))
    timeout = settings.auth.request_timeout_seconds

    credentials = ClientCredentialManager(registry.store)
    stackspot = StackSpotProvider(
        StackSpotIdentityClient(settings.stackspot, timeout=timeout, transport=transport),
        credentials,
    )
    vault = VaultProvider(
        registry.store,
        VaultClient(settings.vault, timeout=timeout, transport=transport),
        stackspot,
        default_secret_path=settings.vault.default_secret_path,
    )
    github = GitHubProvider(
        registry.store,
        GitHubClient(settings.github, timeout=timeout, transport=transport),
        token_env_var=settings.github.token_env_var,
    )

    registry.register(ProviderAlias.STACKSPOT_API, stackspot)
    registry.register(ProviderAlias.HASHICORP_VAULT, vault)
    registry.register(ProviderAlias.GITHUB, github)
    return registry


def build_auth_service(
    registry: GeneratorRegistry, *, token_cache: Optional[TokenCache] = None
) -> AuthService:
    """Compose the facade from a registry built by ``build_generator_registry``."""
    return AuthService(
        credentials=ClientCredentialManager(registry.store),
        token_cache=token_cache or TokenCache(registry.store, registry),
        provider=registry.get(ProviderAlias.STACKSPOT_API),
    )


__all__ = ["build_auth_service", "build_generator_registry"]
