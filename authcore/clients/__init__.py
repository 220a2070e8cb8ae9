"""Expose constructed client wrappers."""

from .github import GitHubClient, GitHubUser
from .keyring_store import KeyringStore
from .memory_store import MemoryStore
from .stackspot_idm import StackSpotIdentityClient
from .storage import CredentialStore, build_store
from .vault import VaultClient

__all__ = [
    "CredentialStore",
    "GitHubClient",
    "GitHubUser",
    "KeyringStore",
    "MemoryStore",
    "StackSpotIdentityClient",
    "VaultClient",
    "build_store",
]
