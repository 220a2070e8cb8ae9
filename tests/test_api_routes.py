try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from urllib.parse import parse_qs

import httpx
import pytest

from authcore.clients import MemoryStore
from authcore.core.config import AppSettings
from authcore.main import app
from authcore.models.token import ProviderAlias
from authcore.services import TokenCache, build_auth_service, build_generator_registry

pytestmark = pytest.mark.anyio("asyncio")


class IdentityServer:
    """Scripted upstream answering the StackSpot token and GitHub user endpoints."""

    def __init__(self) -> None:
        self.token_status = 200
        self.issued = 0
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            self.issued += 1
            return httpx.Response(200, json={"access_token": f"tok_{self.issued}", "expires_in": 3600})
        if request.url.path == "/user":
            if request.headers.get("authorization") == "token ghp_valid":
                return httpx.Response(200, json={"login": "octocat", "id": 1})
            return httpx.Response(401)
        return httpx.Response(404)


@pytest.fixture()
def upstream() -> IdentityServer:
    return IdentityServer()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def overrides(upstream: IdentityServer, store: MemoryStore, clock):
    from authcore import dependencies

    settings = AppSettings()
    registry = build_generator_registry(settings, store=store, transport=httpx.MockTransport(upstream))
    cache = TokenCache(store, registry, clock=clock)
    service = build_auth_service(registry, token_cache=cache)

    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_app_settings: lambda: settings,
            dependencies.get_generator_registry: lambda: registry,
            dependencies.get_token_cache: lambda: cache,
            dependencies.get_auth_service: lambda: service,
            dependencies.get_vault_provider: lambda: registry.get(ProviderAlias.HASHICORP_VAULT),
            dependencies.get_github_provider: lambda: registry.get(ProviderAlias.GITHUB),
        }
    )
    yield registry
    app.dependency_overrides.clear()


async def _client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://testserver")


async def test_token_request_without_credentials_is_conflict(overrides) -> None:
    async with await _client() as client:
        response = await client.post("/api/tokens/execution")

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "NotConfiguredError"


async def test_setup_then_issue_and_reuse_token(overrides, upstream: IdentityServer) -> None:
    async with await _client() as client:
        setup = await client.post(
            "/api/auth/credentials", json={"client_id": "client", "client_secret": "secret"}
        )
        first = await client.post("/api/tokens/execution")
        second = await client.post("/api/tokens/execution")

    assert setup.status_code == 204
    assert first.status_code == 200
    assert first.json() == {
        "scope": "execution",
        "alias": "stackspot-api",
        "access_token": "tok_1",
        "token_type": "Bearer",
    }
    assert second.json()["access_token"] == "tok_1"
    assert upstream.issued == 1
    assert parse_qs(upstream.requests[0].content.decode())["scope"] == ["execution"]


async def test_empty_credentials_are_rejected(overrides, store: MemoryStore) -> None:
    async with await _client() as client:
        response = await client.post("/api/auth/credentials", json={"client_id": "", "client_secret": "s"})

    assert response.status_code == 400
    assert "client_id" in response.json()["detail"]["message"]
    assert store.keys() == []


async def test_rejected_exchange_is_bad_gateway(overrides, upstream: IdentityServer) -> None:
    upstream.token_status = 401

    async with await _client() as client:
        await client.post("/api/auth/credentials", json={"client_id": "client", "client_secret": "bad"})
        response = await client.post("/api/tokens/read")

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["error"] == "TokenGenerationFailedError"
    assert detail["hint"]


async def test_unknown_alias_is_not_found(overrides) -> None:
    async with await _client() as client:
        response = await client.post("/api/tokens/read", params={"alias": "gitlab"})

    assert response.status_code == 404


async def test_unknown_scope_is_validation_error(overrides) -> None:
    async with await _client() as client:
        response = await client.post("/api/tokens/admin")

    assert response.status_code == 422


async def test_github_token_setup_and_issue(overrides, store: MemoryStore) -> None:
    async with await _client() as client:
        rejected = await client.put("/api/auth/providers/github", json={"token": "ghp_revoked"})
        accepted = await client.put("/api/auth/providers/github", json={"token": "ghp_valid"})
        issued = await client.post("/api/tokens/read", params={"alias": "github"})

    assert rejected.status_code == 400
    assert accepted.status_code == 204
    assert issued.json()["access_token"] == "ghp_valid"
    assert store.exists("token_read_github")


async def test_vault_config_is_stored(overrides, store: MemoryStore) -> None:
    async with await _client() as client:
        response = await client.put(
            "/api/auth/providers/vault",
            json={"vault_url": "https://vault.example.com", "aws_role": "stackspot-role"},
        )
        missing_role = await client.put(
            "/api/auth/providers/vault", json={"vault_url": "https://vault.example.com", "aws_role": ""}
        )

    assert response.status_code == 204
    assert store.get("vault_url") == "https://vault.example.com"
    assert store.get("vault_aws_role") == "stackspot-role"
    assert missing_role.status_code == 400


async def test_invalidate_forces_new_exchange(overrides, upstream: IdentityServer) -> None:
    async with await _client() as client:
        await client.post("/api/auth/credentials", json={"client_id": "client", "client_secret": "secret"})
        await client.post("/api/tokens/write")
        deleted = await client.delete("/api/tokens")
        refreshed = await client.post("/api/tokens/write")

    assert deleted.status_code == 204
    assert refreshed.json()["access_token"] == "tok_2"
    assert upstream.issued == 2


async def test_status_reports_cached_tokens(overrides) -> None:
    async with await _client() as client:
        await client.post("/api/auth/credentials", json={"client_id": "client", "client_secret": "secret"})
        await client.post("/api/tokens/creation")
        response = await client.get("/api/auth/status")

    body = response.json()
    assert response.status_code == 200
    assert body["configured"] is True
    assert body["auth_mode"] == "stackspot_service"
    assert body["providers"] == ["github", "hashicorp-vault", "stackspot-api"]
    cached = [entry for entry in body["tokens"] if entry["cached"]]
    assert [(entry["scope"], entry["alias"]) for entry in cached] == [("creation", "stackspot-api")]
