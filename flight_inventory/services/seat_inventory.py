"""
Per-class seat inventory for a single flight.

Tracks total and available seats for economy, business and first class and
keeps every available count within [0, total]. Operations never raise:

- reserve() floors at zero instead of failing on over-reservation
- release() caps at the class total instead of failing on over-release
- unrecognised travel classes are a no-op for reserve/release, report no
  availability, and price as economy

Callers that need a hard "not enough seats" signal check has_available()
first (see BookingService).
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Union

from ..models.enums import TravelClass

logger = logging.getLogger(__name__)

ClassKey = Union[TravelClass, str, None]


@dataclass
class ClassInventory:
    """Seat counters and price for one travel class."""
    total: int = 0
    available: int = 0
    price: Optional[Decimal] = None

    def clamp(self, value: int) -> int:
        return max(0, min(self.total, value))


class SeatInventory:
    """
    Seat counters for one flight, keyed by travel class.

    The inventory is a plain in-memory object with no locking of its own.
    Concurrent callers must serialise has_available() + reserve() themselves.
    """

    def __init__(
        self,
        economy: ClassInventory,
        business: Optional[ClassInventory] = None,
        first: Optional[ClassInventory] = None,
    ):
        self._pools: Dict[TravelClass, ClassInventory] = {
            TravelClass.ECONOMY: economy,
            TravelClass.BUSINESS: business or ClassInventory(),
            TravelClass.FIRST: first or ClassInventory(),
        }

    def _pool(self, travel_class: ClassKey) -> Optional[ClassInventory]:
        resolved = TravelClass.parse(travel_class)
        if resolved is None:
            return None
        return self._pools[resolved]

    def initialize(self) -> None:
        """
        Set available = total for every class.

        Called once when the flight record is created. Calling it again
        discards every reservation made since.
        """
        for pool in self._pools.values():
            pool.available = pool.total

    def has_available(self, travel_class: ClassKey, count: int) -> bool:
        pool = self._pool(travel_class)
        if pool is None:
            return False
        return pool.available >= count

    def price_for(self, travel_class: ClassKey) -> Optional[Decimal]:
        """
        Price for a class.

        Unrecognised classes fall back to the economy price. Business and
        first return None when the class is not offered.
        """
        pool = self._pool(travel_class)
        if pool is None:
            return self._pools[TravelClass.ECONOMY].price
        return pool.price

    def reserve(self, travel_class: ClassKey, count: int) -> None:
        pool = self._pool(travel_class)
        if pool is None:
            logger.debug(f"Ignoring reserve for unrecognised travel class {travel_class!r}")
            return
        requested = pool.available - count
        pool.available = pool.clamp(requested)
        if requested < 0:
            logger.debug(
                f"Reserve of {count} {travel_class} seats floored at 0 "
                f"(short by {-requested})"
            )

    def release(self, travel_class: ClassKey, count: int) -> None:
        pool = self._pool(travel_class)
        if pool is None:
            logger.debug(f"Ignoring release for unrecognised travel class {travel_class!r}")
            return
        requested = pool.available + count
        pool.available = pool.clamp(requested)
        if requested > pool.total:
            logger.debug(
                f"Release of {count} {travel_class} seats capped at total {pool.total}"
            )

    def available(self, travel_class: ClassKey) -> int:
        pool = self._pool(travel_class)
        return pool.available if pool else 0

    def total(self, travel_class: ClassKey) -> int:
        pool = self._pool(travel_class)
        return pool.total if pool else 0

    def snapshot(self) -> Dict[str, Dict[str, object]]:
        """Plain-dict view of every class, for logging and display."""
        return {
            travel_class.value: {
                "total": pool.total,
                "available": pool.available,
                "price": pool.price,
            }
            for travel_class, pool in self._pools.items()
        }

    def __repr__(self):
        counts = ", ".join(
            f"{c.value}={p.available}/{p.total}" for c, p in self._pools.items()
        )
        return f"<SeatInventory({counts})>"
