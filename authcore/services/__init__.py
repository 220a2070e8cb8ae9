"""Service layer exports."""

from .auth_service import AuthService
from .bootstrap import build_auth_service, build_generator_registry
from .client_credentials import ClientCredentialManager
from .providers import GitHubProvider, StackSpotProvider, VaultProvider
from .registry import GeneratorRegistry, TokenProvider
from .token_cache import TokenCache

__all__ = [
    "AuthService",
    "ClientCredentialManager",
    "GeneratorRegistry",
    "GitHubProvider",
    "StackSpotProvider",
    "TokenCache",
    "TokenProvider",
    "VaultProvider",
    "build_auth_service",
    "build_generator_registry",
]
