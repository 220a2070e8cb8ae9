try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import threading

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError

from authcore.clients import KeyringStore, MemoryStore, build_store
from authcore.clients.storage import resolve_storage_type
from authcore.core.config import AuthSettings, StorageType
from authcore.core.errors import NotFoundError, StoreError
from authcore.services import ClientCredentialManager


class InMemoryKeyring(KeyringBackend):
    priority = 1  # type: ignore[assignment]

    def __init__(self) -> None:
        super().__init__()
        self.passwords: dict[tuple[str, str], str] = {}

    def set_password(self, service: str, username: str, password: str) -> None:
        self.passwords[(service, username)] = password

    def get_password(self, service: str, username: str) -> str | None:
        return self.passwords.get((service, username))

    def delete_password(self, service: str, username: str) -> None:
        try:
            del self.passwords[(service, username)]
        except KeyError:
            raise PasswordDeleteError("not found") from None


class LockedKeyring(InMemoryKeyring):
    def set_password(self, service: str, username: str, password: str) -> None:
        raise KeyringError("keyring is locked")

    def get_password(self, service: str, username: str) -> str | None:
        raise KeyringError("keyring is locked")


@pytest.fixture
def fake_keyring():
    previous = keyring.get_keyring()
    backend = InMemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


def test_memory_store_set_get_delete() -> None:
    store = MemoryStore()
    store.set("token_read_github", "value")

    assert store.exists("token_read_github")
    assert store.get("token_read_github") == "value"

    store.delete("token_read_github")
    assert not store.exists("token_read_github")
    with pytest.raises(NotFoundError):
        store.get("token_read_github")


def test_memory_store_delete_missing_key_is_noop() -> None:
    store = MemoryStore()
    store.delete("missing")
    assert store.keys() == []


def test_memory_store_clear_drops_everything() -> None:
    store = MemoryStore()
    store.set("a", "1")
    store.set("b", "2")

    store.clear()

    assert store.keys() == []


def test_memory_store_concurrent_writers_and_readers() -> None:
    store = MemoryStore()
    errors: list[BaseException] = []
    start = threading.Barrier(50)

    def worker(index: int) -> None:
        try:
            start.wait()
            for round_ in range(100):
                key = f"key-{index}"
                store.set(key, f"{index}-{round_}")
                assert store.get(key) == f"{index}-{round_}"
                assert store.exists(key)
        except BaseException as exc:  # noqa: BLE001 - surfaced via the errors list
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(50)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert not errors
    assert len(store.keys()) == 50
    for index in range(50):
        assert store.get(f"key-{index}") == f"{index}-99"


def test_keyring_store_roundtrip(fake_keyring: InMemoryKeyring) -> None:
    store = KeyringStore(service_name="phengineer-test")
    store.set("stackspot_client_id", "client")

    assert fake_keyring.passwords[("phengineer-test", "stackspot_client_id")] == "client"
    assert store.get("stackspot_client_id") == "client"
    assert store.exists("stackspot_client_id")

    store.delete("stackspot_client_id")
    assert not store.exists("stackspot_client_id")


def test_keyring_store_missing_key_raises_not_found(fake_keyring: InMemoryKeyring) -> None:
    store = KeyringStore(service_name="phengineer-test")

    with pytest.raises(NotFoundError) as exc_info:
        store.get("vault_url")
    assert exc_info.value.key == "vault_url"

    store.delete("vault_url")


def test_keyring_store_wraps_backend_failures() -> None:
    previous = keyring.get_keyring()
    keyring.set_keyring(LockedKeyring())
    try:
        with pytest.raises(StoreError):
            KeyringStore().set("github_token", "ghp_x")
    finally:
        keyring.set_keyring(previous)


@pytest.mark.parametrize(
    ("mode", "override", "expected"),
    [
        ("stackspot_user", None, StorageType.KEYRING),
        ("stackspot_service", None, StorageType.MEMORY),
        ("something-else", None, StorageType.KEYRING),
        ("stackspot_user", StorageType.MEMORY, StorageType.MEMORY),
    ],
)
def test_storage_type_follows_auth_mode(mode, override, expected) -> None:
    assert resolve_storage_type(mode, override) is expected


def test_build_store_selects_backend() -> None:
    memory = build_store(AuthSettings(AUTH_MODE="stackspot_service", AUTH_STORAGE_TYPE=""))
    durable = build_store(AuthSettings(AUTH_MODE="stackspot_user", AUTH_STORAGE_TYPE=""))

    assert isinstance(memory, MemoryStore)
    assert isinstance(durable, KeyringStore)


def test_locked_keyring_is_not_reported_as_missing_configuration() -> None:
    previous = keyring.get_keyring()
    keyring.set_keyring(LockedKeyring())
    try:
        store = KeyringStore()
        with pytest.raises(StoreError):
            store.exists("stackspot_client_id")
        with pytest.raises(StoreError):
            ClientCredentialManager(store).has_credentials()
    finally:
        keyring.set_keyring(previous)
