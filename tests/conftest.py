"""Shared test fixtures for the invoicer test suite."""

import pytest

# Reset vault client singleton so env changes in one test don't leak
import clients.vault_client as vault_module

from clients.valkey_client import ValkeyClient
from core.dual_store import DualBackendStore
from core.local_store import LocalStore
from fakes import InMemoryRedis, InMemoryRemoteStore


@pytest.fixture(autouse=True)
def reset_vault_cache():
    vault_module._vault_client_instance = None
    vault_module._secret_cache.clear()
    yield
    vault_module._vault_client_instance = None
    vault_module._secret_cache.clear()


# =============================================================================
# BACKEND FIXTURES
# =============================================================================


@pytest.fixture
def redis_backend():
    """Dict-backed redis stand-in; inspect `.data` for raw keys."""
    return InMemoryRedis()


@pytest.fixture
def valkey(monkeypatch, redis_backend):
    """ValkeyClient wired to the in-memory backend."""
    monkeypatch.setattr(
        "clients.valkey_client.redis.from_url",
        lambda url, decode_responses: redis_backend,
    )
    return ValkeyClient("redis://in-memory/0")


@pytest.fixture
def local_store(valkey):
    return LocalStore(valkey)


@pytest.fixture
def remote():
    """Remote store that returns collections in shuffled order."""
    return InMemoryRemoteStore(shuffle=True)


# =============================================================================
# STORE FIXTURES
# =============================================================================


@pytest.fixture
def store(local_store, remote):
    """ONLINE store, bootstrapped against an empty remote."""
    s = DualBackendStore(local_store, remote)
    s.bootstrap()
    return s


@pytest.fixture
def offline_store(local_store):
    """Store with no remote configured."""
    s = DualBackendStore(local_store)
    s.bootstrap()
    return s
