"""
Tests for the per-flight lock managers.

The Valkey backend runs against an in-memory mock client implementing the
handful of commands the lock manager uses.
"""

import threading
import pytest
from valkey.exceptions import ConnectionError as ValkeyServerConnectionError

from flight_inventory.cache.config import ValkeyConfig, ValkeyConnectionError
from flight_inventory.services.lock_manager import (
    LocalLockManager,
    LockAcquisitionError,
    ValkeyLockManager,
    build_lock_key,
    create_lock_manager,
)
from flight_inventory.utils.config import AppConfig


class MockValkeyClient:
    """Mock Valkey client for testing."""

    def __init__(self):
        self.data = {}
        self.expiry = {}
        self.fail = False

    def set(self, key, value, nx=False, ex=None):
        """Mock SET operation."""
        if self.fail:
            raise ValkeyServerConnectionError("connection refused")
        if nx and key in self.data:
            return None
        self.data[key] = value
        self.expiry[key] = ex
        return True

    def eval(self, script, num_keys, *args):
        """Mock EVAL for the compare-and-delete release script."""
        key, expected_value = args[0], args[1]
        if self.data.get(key) == expected_value:
            self.data.pop(key, None)
            return 1
        return 0


@pytest.fixture
def mock_client():
    return MockValkeyClient()


@pytest.fixture
def valkey_locks(mock_client):
    return ValkeyLockManager(mock_client, lock_ttl_seconds=20, default_timeout_seconds=0.05, retry_delay=0.01)


class TestLocalLockManager:

    def test_hold_yields_lock_info(self):
        locks = LocalLockManager()

        with locks.hold("QS1234") as lock:
            assert lock.lock_key == build_lock_key("QS1234") == "flight:lock:QS1234"
            assert lock.owner_id == locks.instance_id
            assert not lock.is_expired

    def test_held_lock_blocks_other_callers(self):
        locks = LocalLockManager(default_timeout_seconds=0.05)
        results = []

        with locks.hold("QS1234"):
            worker = threading.Thread(target=lambda: results.append(locks.acquire("QS1234")))
            worker.start()
            worker.join()

        assert results == [None]

    def test_hold_raises_on_timeout(self):
        locks = LocalLockManager(default_timeout_seconds=0.05)
        held = locks.acquire("QS1234")

        with pytest.raises(LockAcquisitionError) as exc_info:
            with locks.hold("QS1234"):
                pass

        assert exc_info.value.resource_key == "QS1234"
        assert locks.release(held)

    def test_different_flights_do_not_contend(self):
        locks = LocalLockManager(default_timeout_seconds=0.05)

        with locks.hold("QS1"):
            with locks.hold("QS2") as second:
                assert second.lock_key.endswith("QS2")

    def test_released_after_block_even_on_error(self):
        locks = LocalLockManager(default_timeout_seconds=0.05)

        with pytest.raises(RuntimeError):
            with locks.hold("QS1234"):
                raise RuntimeError("boom")

        lock = locks.acquire("QS1234")
        assert lock is not None
        locks.release(lock)

    def test_release_without_holding(self):
        locks = LocalLockManager()
        lock = locks.acquire("QS1234")
        locks.release(lock)

        assert not locks.release(lock)

    def test_other_thread_cannot_release(self):
        locks = LocalLockManager(default_timeout_seconds=0.05)
        lock = locks.acquire("QS1234")
        results = []

        worker = threading.Thread(target=lambda: results.append(locks.release(lock)))
        worker.start()
        worker.join()

        assert results == [False]
        assert locks.acquire("QS1234") is None
        assert locks.release(lock)


class TestValkeyLockManager:

    def test_acquire_sets_key_with_ttl(self, valkey_locks, mock_client):
        lock = valkey_locks.acquire("QS1234")

        assert lock is not None
        assert mock_client.data["flight:lock:QS1234"] == lock.lock_value
        assert mock_client.expiry["flight:lock:QS1234"] == 20
        assert lock.lock_value.startswith(valkey_locks.instance_id)
        assert lock.to_dict()["expires_at"] is not None

    def test_second_acquire_times_out(self, valkey_locks):
        first = valkey_locks.acquire("QS1234")

        assert valkey_locks.acquire("QS1234") is None
        assert valkey_locks.release(first)
        assert valkey_locks.acquire("QS1234") is not None

    def test_hold_releases_key(self, valkey_locks, mock_client):
        with valkey_locks.hold("QS1234"):
            assert "flight:lock:QS1234" in mock_client.data

        assert "flight:lock:QS1234" not in mock_client.data

    def test_hold_raises_when_taken(self, valkey_locks):
        valkey_locks.acquire("QS1234")

        with pytest.raises(LockAcquisitionError):
            with valkey_locks.hold("QS1234"):
                pass

    def test_only_owner_can_release(self, valkey_locks, mock_client):
        lock = valkey_locks.acquire("QS1234")
        mock_client.data[lock.lock_key] = "someone-else"

        assert not valkey_locks.release(lock)
        assert mock_client.data[lock.lock_key] == "someone-else"

    def test_server_unavailable(self, valkey_locks, mock_client):
        mock_client.fail = True

        with pytest.raises(ValkeyConnectionError):
            valkey_locks.acquire("QS1234")


class TestCreateLockManager:

    def test_local_backend(self):
        locks = create_lock_manager(AppConfig(lock_backend="local", lock_timeout_seconds=2.5))

        assert isinstance(locks, LocalLockManager)
        assert locks.default_timeout_seconds == 2.5

    def test_valkey_backend(self):
        config = AppConfig(
            lock_backend="valkey", lock_ttl_seconds=45, valkey_host="cache.internal", valkey_socket_timeout=1.5
        )
        locks = create_lock_manager(config)

        assert isinstance(locks, ValkeyLockManager)
        assert locks.lock_ttl_seconds == 45
        pool_kwargs = locks.client.connection_pool.connection_kwargs
        assert pool_kwargs["host"] == "cache.internal"
        assert pool_kwargs["socket_timeout"] == 1.5
        assert pool_kwargs["socket_connect_timeout"] == 1.5

    def test_valkey_config_from_env(self, monkeypatch):
        monkeypatch.setenv("VALKEY_HOST", "cache.internal")
        monkeypatch.setenv("VALKEY_SOCKET_TIMEOUT", "0.5")
        monkeypatch.delenv("VALKEY_PASSWORD", raising=False)

        config = ValkeyConfig.from_env()

        assert config.host == "cache.internal"
        assert config.to_connection_kwargs()["socket_timeout"] == 0.5
        assert "password" not in config.to_connection_kwargs()

    def test_valkey_config_hides_password(self):
        config = ValkeyConfig(password="hunter2")

        assert "hunter2" not in str(config)
        assert config.to_connection_kwargs()["password"] == "hunter2"
