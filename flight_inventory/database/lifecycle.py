"""
Lifecycle stamping for flight records.

The repository calls these at well-defined points instead of relying on
ORM event hooks:

- on_create() before a new flight is added to the session
- on_update() before changes to an existing flight are flushed
"""

import logging
from datetime import datetime
from typing import Optional

from .models import Flight

logger = logging.getLogger(__name__)


def on_create(flight: Flight, now: Optional[datetime] = None) -> Flight:
    """
    Stamp a new flight and open its seat inventory.

    Sets created_at (only if not already set) and updated_at, and makes every
    class fully available. Must run exactly once per record: a second call
    would erase existing reservations.

    Args:
        flight: Transient Flight about to be inserted
        now: Timestamp override, defaults to datetime.now()

    Returns:
        The same flight, for chaining
    """
    now = now or datetime.now()
    if flight.created_at is None:
        flight.created_at = now
    flight.updated_at = now

    inventory = flight.seat_inventory()
    inventory.initialize()
    flight.apply_inventory(inventory)

    logger.debug(f"Initialized flight {flight.flight_number}: {inventory!r}")
    return flight


def on_update(flight: Flight, now: Optional[datetime] = None) -> Flight:
    """Refresh updated_at; created_at is left untouched."""
    flight.updated_at = now or datetime.now()
    return flight
