"""Shared test fixtures for credkeep."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from credkeep.core.cache import MemoryCache, process_cache
from credkeep.core.manager import CredentialManager
from credkeep.core.registry import CredentialRegistry
from credkeep.core.store import CredentialStore
from credkeep.errors import CredentialExpiredError
from credkeep.models.credentials import CredentialSpec, CredentialType

TOKEN_KEY = "BOGUS_API"
SSH_KEY = "BOGUS_SSH"


class CountingVerifier:
    """Verify capability that records each call.

    ``outcome`` is one of ``"ok"``, ``"raise"``, ``"false"``, ``"expired"``.
    """

    def __init__(self, outcome: str = "ok", *, is_async: bool = False) -> None:
        self.outcome = outcome
        self.is_async = is_async
        self.calls: list[list[str]] = []

    def _result(self, files: list[str]) -> bool:
        self.calls.append(files)
        if self.outcome == "raise":
            raise RuntimeError("credential rejected by service")
        if self.outcome == "expired":
            raise CredentialExpiredError("token expired")
        return self.outcome != "false"

    def __call__(self, files: list[str]) -> Any:
        if not self.is_async:
            return self._result(files)

        async def _verify() -> bool:
            return self._result(files)

        return _verify()


def read_token(files: list[str]) -> str:
    return Path(files[0]).read_text(encoding="utf-8").strip()


async def read_token_async(files: list[str]) -> str:
    return read_token(files)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep every test away from the real home directory and process cache."""
    monkeypatch.setenv("CREDKEEP_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("CREDKEEP_CREDENTIALS_DB_PATH", raising=False)
    process_cache().clear()


@pytest.fixture
def cache() -> MemoryCache:
    """Provide a fresh cache, separate from the process cache."""
    return MemoryCache()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Provide a credentials document location in a temp directory."""
    return tmp_path / "credentials" / "db.yaml"


@pytest.fixture
def make_verifier() -> Callable[..., CountingVerifier]:
    """Factory fixture: build a CountingVerifier with the given outcome."""
    return CountingVerifier


@pytest.fixture
def verifier() -> CountingVerifier:
    return CountingVerifier()


@pytest.fixture
def make_spec() -> Callable[..., CredentialSpec]:
    """Factory fixture: build a CredentialSpec with sensible defaults."""

    def _factory(
        key: str = "TEST_TOKEN",
        cred_type: str = CredentialType.AUTH_TOKEN,
        **overrides: Any,
    ) -> CredentialSpec:
        defaults: dict[str, Any] = {
            "key": key,
            "name": f"{key} credential",
            "type": cred_type,
            "verify": CountingVerifier(),
        }
        defaults.update(overrides)
        return CredentialSpec(**defaults)

    return _factory


@pytest.fixture
def token_reader_async() -> Callable[[list[str]], Any]:
    return read_token_async


@pytest.fixture
def token_spec(verifier: CountingVerifier) -> CredentialSpec:
    return CredentialSpec(
        key=TOKEN_KEY,
        name="A test credential",
        description="Token used by the test suite.",
        type=CredentialType.AUTH_TOKEN,
        verify=verifier,
        get_token=read_token,
    )


@pytest.fixture
def ssh_spec(verifier: CountingVerifier) -> CredentialSpec:
    return CredentialSpec(
        key=SSH_KEY,
        name="A test SSH key",
        type=CredentialType.SSH_KEY_PAIR,
        verify=verifier,
    )


@pytest.fixture
def registry(token_spec: CredentialSpec, ssh_spec: CredentialSpec) -> CredentialRegistry:
    """Provide a registry with one token and one SSH credential type."""
    registry = CredentialRegistry()
    registry.register(token_spec)
    registry.register(ssh_spec)
    return registry


@pytest.fixture
def store(registry: CredentialRegistry, cache: MemoryCache, db_path: Path) -> CredentialStore:
    return CredentialStore(registry, cache=cache, db_path=db_path)


@pytest.fixture
def manager(registry: CredentialRegistry, cache: MemoryCache, db_path: Path) -> CredentialManager:
    return CredentialManager(registry, cache=cache, db_path=db_path)


@pytest.fixture
def make_token_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write a token file and return its path."""

    def _factory(name: str = "api-token", content: str = "abc123") -> Path:
        path = tmp_path / "src" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content + "\n", encoding="utf-8")
        return path

    return _factory


@pytest.fixture
def make_ssh_pair(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write a private/public key pair, return the private key path."""

    def _factory(name: str = "id_test") -> Path:
        private = tmp_path / "ssh" / name
        private.parent.mkdir(parents=True, exist_ok=True)
        private.write_text("PRIVATE KEY\n", encoding="utf-8")
        private.with_name(name + ".pub").write_text("ssh-ed25519 AAAA test\n", encoding="utf-8")
        return private

    return _factory
