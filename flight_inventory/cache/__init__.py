"""
Valkey connection settings used by the distributed flight lock.
"""

from .config import ValkeyConfig, ValkeyConnectionError

__all__ = [
    "ValkeyConfig",
    "ValkeyConnectionError",
]
