"""
Business logic services for the flight inventory.

This module contains the seat inventory and the per-flight lock managers.
The booking service depends on the database package and is imported from
flight_inventory.services.booking_service directly.
"""

from .seat_inventory import SeatInventory, ClassInventory
from .lock_manager import (
    FlightLockManager,
    LocalLockManager,
    ValkeyLockManager,
    LockInfo,
    LockAcquisitionError,
    create_lock_manager,
)

__all__ = [
    'SeatInventory',
    'ClassInventory',
    'FlightLockManager',
    'LocalLockManager',
    'ValkeyLockManager',
    'LockInfo',
    'LockAcquisitionError',
    'create_lock_manager',
]
