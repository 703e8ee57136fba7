"""
Valkey connection settings for the distributed flight lock.

Values come from environment variables (a .env file is honoured) with
local defaults.
"""

import os
import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass

import valkey
from valkey.connection import ConnectionPool
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


@dataclass
class ValkeyConfig:
    """Where the lock server lives and how long a command may block."""

    host: str = "localhost"
    port: int = 6379
    password: Optional[str] = None
    database: int = 0
    max_connections: int = 10
    # Applies to connect and to each command; a lock call never waits longer
    socket_timeout: float = 5.0

    @classmethod
    def from_env(cls) -> "ValkeyConfig":
        return cls(
            host=os.getenv("VALKEY_HOST", "localhost"),
            port=int(os.getenv("VALKEY_PORT", "6379")),
            password=os.getenv("VALKEY_PASSWORD") or None,
            database=int(os.getenv("VALKEY_DATABASE", "0")),
            max_connections=int(os.getenv("VALKEY_MAX_CONNECTIONS", "10")),
            socket_timeout=float(os.getenv("VALKEY_SOCKET_TIMEOUT", "5.0")),
        )

    def to_connection_kwargs(self) -> Dict[str, Any]:
        kwargs = {
            "host": self.host,
            "port": self.port,
            "db": self.database,
            "max_connections": self.max_connections,
            "socket_timeout": self.socket_timeout,
            "socket_connect_timeout": self.socket_timeout,
            "decode_responses": True,
        }
        if self.password:
            kwargs["password"] = self.password
        return kwargs

    def create_client(self) -> valkey.Valkey:
        """Build a pooled client. Nothing connects until the first command."""
        pool = ConnectionPool(**self.to_connection_kwargs())
        logger.info(f"Valkey client configured: {self}")
        return valkey.Valkey(connection_pool=pool)

    def __str__(self) -> str:
        secret = "***" if self.password else "None"
        return (
            f"ValkeyConfig({self.host}:{self.port}/{self.database}, "
            f"password={secret}, timeout={self.socket_timeout}s)"
        )


class ValkeyConnectionError(Exception):
    """Raised when the Valkey server cannot be reached."""
