"""
Enums for the flight inventory package.

This module contains the enumeration types shared by the pydantic schemas,
the SQLAlchemy models and the seat inventory.
"""

from enum import Enum
from typing import Optional, Union


class FlightStatus(str, Enum):
    """Flight status. No transition rules: any value may be set at any time."""
    SCHEDULED = "SCHEDULED"
    BOARDING = "BOARDING"
    DEPARTED = "DEPARTED"
    IN_FLIGHT = "IN_FLIGHT"
    ARRIVED = "ARRIVED"
    DELAYED = "DELAYED"
    CANCELLED = "CANCELLED"


class TravelClass(str, Enum):
    """Travel classes, each an independent seat pool with its own price."""
    ECONOMY = "economy"
    BUSINESS = "business"
    FIRST = "first"

    @classmethod
    def parse(cls, value: Union["TravelClass", str, None]) -> Optional["TravelClass"]:
        """
        Resolve a travel class leniently.

        Strings are matched case-insensitively but otherwise exactly, so
        padded names are not recognised. Anything unrecognised
        (including None) resolves to None instead of raising.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return None
