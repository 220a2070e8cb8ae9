try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from authcore.clients import MemoryStore
from authcore.core.config import AppSettings
from authcore.core.errors import NotConfiguredError, StoreError
from authcore.models.token import ProviderAlias, Scope, TokenResponse
from authcore.services import (
    AuthService,
    ClientCredentialManager,
    GeneratorRegistry,
    TokenCache,
    build_auth_service,
    build_generator_registry,
)


class SequenceProvider:
    def __init__(self) -> None:
        self.calls: list[Scope] = []

    def get_token(self, scope: Scope) -> TokenResponse:
        self.calls.append(scope)
        suffix = "" if len(self.calls) == 1 else f"-{len(self.calls)}"
        return TokenResponse(access_token=f"tok_123{suffix}", expires_in=3600)


class StubbornStore(MemoryStore):
    """Refuses to delete one key but records every attempt."""

    def __init__(self, blocked: str) -> None:
        super().__init__()
        self.blocked = blocked
        self.delete_attempts: list[str] = []

    def delete(self, key: str) -> None:
        self.delete_attempts.append(key)
        if key == self.blocked:
            raise StoreError(f"cannot delete {key}")
        super().delete(key)


def _service(store: MemoryStore, clock, provider: SequenceProvider | None = None) -> AuthService:
    provider = provider or SequenceProvider()
    registry = GeneratorRegistry(store)
    registry.register(ProviderAlias.STACKSPOT_API, provider)
    return AuthService(
        credentials=ClientCredentialManager(store),
        token_cache=TokenCache(store, registry, clock=clock),
        provider=provider,
    )


def test_get_valid_token_requires_credentials(clock) -> None:
    provider = SequenceProvider()
    service = _service(MemoryStore(), clock, provider)

    assert not service.is_setup()
    with pytest.raises(NotConfiguredError):
        service.get_valid_token(Scope.EXECUTION)
    assert provider.calls == []


def test_cached_token_then_refresh_after_expiry(clock) -> None:
    provider = SequenceProvider()
    service = _service(MemoryStore(), clock, provider)
    service.setup_credentials("client", "secret")

    assert service.get_valid_token(Scope.EXECUTION) == "tok_123"
    assert service.get_valid_token(Scope.EXECUTION) == "tok_123"
    assert len(provider.calls) == 1

    clock.advance(3601)

    assert service.get_valid_token(Scope.EXECUTION) == "tok_123-2"
    assert len(provider.calls) == 2


def test_invalidate_all_forces_regeneration(clock) -> None:
    store = MemoryStore()
    provider = SequenceProvider()
    service = _service(store, clock, provider)
    service.setup_credentials("client", "secret")
    for scope in Scope:
        service.get_valid_token(scope)

    service.invalidate_all_tokens()

    assert not any(key.startswith("token_") for key in store.keys())
    service.get_valid_token(Scope.READ)
    assert len(provider.calls) == len(Scope) + 1


def test_invalidate_single_scope_keeps_others(clock) -> None:
    store = MemoryStore()
    service = _service(store, clock)
    service.setup_credentials("client", "secret")
    service.get_valid_token(Scope.READ)
    service.get_valid_token(Scope.WRITE)

    service.invalidate_token(Scope.READ)

    assert not store.exists("token_read_stackspot-api")
    assert store.exists("token_write_stackspot-api")


def test_invalidate_all_attempts_every_scope_before_failing(clock) -> None:
    store = StubbornStore(blocked="token_creation_stackspot-api")
    service = _service(store, clock)

    with pytest.raises(StoreError):
        service.invalidate_all_tokens()

    assert store.delete_attempts == [f"token_{scope.value}_stackspot-api" for scope in Scope]


def test_get_token_for_uses_registered_alias(clock) -> None:
    store = MemoryStore()
    github = SequenceProvider()
    registry = GeneratorRegistry(store)
    registry.register(ProviderAlias.GITHUB, github)
    service = AuthService(
        credentials=ClientCredentialManager(store),
        token_cache=TokenCache(store, registry, clock=clock),
        provider=SequenceProvider(),
    )

    # Other aliases do not depend on the StackSpot client pair.
    assert service.get_token_for(Scope.READ, ProviderAlias.GITHUB) == "tok_123"
    assert github.calls == [Scope.READ]
    assert store.exists("token_read_github")


def test_bootstrap_registers_every_provider() -> None:
    registry = build_generator_registry(
        AppSettings(),
        store=MemoryStore(),
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )

    assert registry.aliases() == ["github", "hashicorp-vault", "stackspot-api"]
    service = build_auth_service(registry)
    assert not service.is_setup()


def test_bootstrap_service_exchanges_through_transport(clock) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": "tok_123", "expires_in": 3600})

    store = MemoryStore()
    registry = build_generator_registry(
        AppSettings(), store=store, transport=httpx.MockTransport(handler)
    )
    service = build_auth_service(registry, token_cache=TokenCache(store, registry, clock=clock))
    service.setup_credentials("client", "secret")

    assert service.get_valid_token(Scope.EXECUTION) == "tok_123"
    assert store.exists("token_execution_stackspot-api")
