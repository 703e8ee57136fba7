"""
Per-flight lock managers.

SeatInventory has no synchronization of its own, so "has_available() then
reserve()" is a check-then-act race when two bookings hit the same flight.
The booking service closes it by holding a lock keyed by flight number
around the whole sequence.

Two backends share one interface:
- LocalLockManager: threading locks, for a single process
- ValkeyLockManager: SET NX EX with owner-checked release, for several
  processes sharing one Valkey server
"""

import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterator, Optional

from valkey.exceptions import ConnectionError as ValkeyServerConnectionError
from valkey.exceptions import TimeoutError as ValkeyServerTimeoutError

from ..cache.config import ValkeyConfig, ValkeyConnectionError

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "flight:lock"

# Compare-and-delete: only the holder may release
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class LockAcquisitionError(Exception):
    """Raised when a lock cannot be acquired within the timeout."""

    def __init__(self, resource_key: str, timeout_seconds: float):
        super().__init__(f"Could not lock {resource_key} within {timeout_seconds:.1f}s")
        self.resource_key = resource_key
        self.timeout_seconds = timeout_seconds


@dataclass
class LockInfo:
    """Information about a held lock."""
    lock_key: str
    lock_value: str
    acquired_at: datetime
    expires_at: Optional[datetime]
    owner_id: str

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and datetime.now() > self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lock_key": self.lock_key,
            "lock_value": self.lock_value,
            "acquired_at": self.acquired_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "owner_id": self.owner_id,
            "is_expired": self.is_expired,
        }


def build_lock_key(resource_key: str) -> str:
    return f"{LOCK_KEY_PREFIX}:{resource_key}"


class FlightLockManager(ABC):
    """Common interface for the lock backends."""

    def __init__(self, default_timeout_seconds: float = 5.0):
        self.instance_id = str(uuid.uuid4())[:8]
        self.default_timeout_seconds = default_timeout_seconds

    @abstractmethod
    def acquire(self, resource_key: str, timeout_seconds: Optional[float] = None) -> Optional[LockInfo]:
        """Try to take the lock; None on timeout."""

    @abstractmethod
    def release(self, lock_info: LockInfo) -> bool:
        """Release a lock taken by acquire(); False if it was no longer ours."""

    @contextmanager
    def hold(self, resource_key: str, timeout_seconds: Optional[float] = None) -> Iterator[LockInfo]:
        """
        Hold the lock for the duration of the with-block.

        Raises:
            LockAcquisitionError: If the lock is not acquired in time
        """
        timeout = self.default_timeout_seconds if timeout_seconds is None else timeout_seconds
        lock_info = self.acquire(resource_key, timeout)
        if lock_info is None:
            raise LockAcquisitionError(resource_key, timeout)
        try:
            yield lock_info
        finally:
            self.release(lock_info)


class LocalLockManager(FlightLockManager):
    """
    In-process locks, one threading.Lock per resource key.

    A lock may only be released by the thread that acquired it.
    """

    def __init__(self, default_timeout_seconds: float = 5.0):
        super().__init__(default_timeout_seconds)
        self._locks: Dict[str, threading.Lock] = {}
        self._owners: Dict[str, str] = {}
        self._registry_lock = threading.Lock()

    def _owner_value(self) -> str:
        return f"{self.instance_id}:{threading.get_ident()}"

    def _lock_for(self, lock_key: str) -> threading.Lock:
        with self._registry_lock:
            if lock_key not in self._locks:
                self._locks[lock_key] = threading.Lock()
            return self._locks[lock_key]

    def acquire(self, resource_key: str, timeout_seconds: Optional[float] = None) -> Optional[LockInfo]:
        timeout = self.default_timeout_seconds if timeout_seconds is None else timeout_seconds
        lock_key = build_lock_key(resource_key)
        if not self._lock_for(lock_key).acquire(timeout=timeout):
            logger.warning(f"Failed to acquire lock: {lock_key} (timeout {timeout}s)")
            return None

        lock_value = self._owner_value()
        with self._registry_lock:
            self._owners[lock_key] = lock_value

        logger.debug(f"Lock acquired: {lock_key}")
        return LockInfo(
            lock_key=lock_key,
            lock_value=lock_value,
            acquired_at=datetime.now(),
            expires_at=None,
            owner_id=self.instance_id,
        )

    def release(self, lock_info: LockInfo) -> bool:
        with self._registry_lock:
            owner = self._owners.get(lock_info.lock_key)
            if owner != lock_info.lock_value or owner != self._owner_value():
                logger.warning(f"Lock release failed (not held by caller): {lock_info.lock_key}")
                return False
            del self._owners[lock_info.lock_key]
            self._locks[lock_info.lock_key].release()
        logger.debug(f"Lock released: {lock_info.lock_key}")
        return True


class ValkeyLockManager(FlightLockManager):
    """
    Distributed locks on a Valkey server.

    Acquisition uses SET NX EX so a crashed holder cannot block a flight
    for longer than the lock TTL.
    """

    def __init__(
        self,
        client,
        lock_ttl_seconds: int = 30,
        default_timeout_seconds: float = 5.0,
        retry_delay: float = 0.05,
    ):
        """
        Args:
            client: valkey.Valkey (or compatible) client
            lock_ttl_seconds: Expiry of each lock key
            default_timeout_seconds: How long hold() waits by default
            retry_delay: Pause between SET NX attempts
        """
        super().__init__(default_timeout_seconds)
        self.client = client
        self.lock_ttl_seconds = lock_ttl_seconds
        self.retry_delay = retry_delay

        logger.info(f"ValkeyLockManager initialized with instance ID: {self.instance_id}")

    @classmethod
    def from_config(cls, config: Optional[ValkeyConfig] = None, **kwargs) -> "ValkeyLockManager":
        config = config or ValkeyConfig.from_env()
        return cls(config.create_client(), **kwargs)

    def acquire(self, resource_key: str, timeout_seconds: Optional[float] = None) -> Optional[LockInfo]:
        timeout = self.default_timeout_seconds if timeout_seconds is None else timeout_seconds
        lock_key = build_lock_key(resource_key)
        lock_value = f"{self.instance_id}:{uuid.uuid4()}"
        deadline = time.monotonic() + timeout
        attempts = 0

        while True:
            attempts += 1
            try:
                acquired = self.client.set(lock_key, lock_value, nx=True, ex=self.lock_ttl_seconds)
            except (ValkeyServerConnectionError, ValkeyServerTimeoutError) as e:
                logger.error(f"Valkey unavailable while locking {lock_key}: {e}")
                raise ValkeyConnectionError(str(e)) from e

            if acquired:
                acquired_at = datetime.now()
                logger.debug(f"Lock acquired: {lock_key} (attempts: {attempts})")
                return LockInfo(
                    lock_key=lock_key,
                    lock_value=lock_value,
                    acquired_at=acquired_at,
                    expires_at=acquired_at + timedelta(seconds=self.lock_ttl_seconds),
                    owner_id=self.instance_id,
                )

            if time.monotonic() >= deadline:
                logger.warning(f"Failed to acquire lock: {lock_key} (attempts: {attempts})")
                return None
            time.sleep(self.retry_delay)

    def release(self, lock_info: LockInfo) -> bool:
        try:
            result = self.client.eval(RELEASE_SCRIPT, 1, lock_info.lock_key, lock_info.lock_value)
        except (ValkeyServerConnectionError, ValkeyServerTimeoutError) as e:
            # The key expires on its own after lock_ttl_seconds
            logger.error(f"Error releasing lock {lock_info.lock_key}: {e}")
            return False

        if result:
            logger.debug(f"Lock released: {lock_info.lock_key}")
            return True
        logger.warning(f"Lock release failed (not owner or expired): {lock_info.lock_key}")
        return False


def create_lock_manager(config) -> FlightLockManager:
    """
    Build the lock manager selected by an AppConfig.

    Args:
        config: AppConfig with lock_backend, lock_ttl_seconds,
            lock_timeout_seconds and the valkey_* settings
    """
    if config.lock_backend == "valkey":
        valkey_config = ValkeyConfig(
            host=config.valkey_host,
            port=config.valkey_port,
            password=config.valkey_password,
            database=config.valkey_database,
            socket_timeout=config.valkey_socket_timeout,
        )
        return ValkeyLockManager.from_config(
            valkey_config,
            lock_ttl_seconds=config.lock_ttl_seconds,
            default_timeout_seconds=config.lock_timeout_seconds,
        )
    return LocalLockManager(default_timeout_seconds=config.lock_timeout_seconds)
