"""
Flight inventory Pydantic models package.

This package contains the enums, schemas and validation helpers used for
data validation, serialization, and type safety across the package.
"""

# Enums
from .enums import (
    FlightStatus,
    TravelClass,
)

# Flight schemas
from .flight import (
    FlightCreateModel,
    FlightUpdateModel,
    FlightModel,
)

# Booking schemas
from .booking import (
    BookingRequestModel,
    BookingModel,
)

# Validation
from .validation import (
    FieldError,
    ValidationResult,
    validate_flight,
    validate_flight_update,
)

__all__ = [
    # Enums
    "FlightStatus",
    "TravelClass",

    # Flight models
    "FlightCreateModel",
    "FlightUpdateModel",
    "FlightModel",

    # Booking models
    "BookingRequestModel",
    "BookingModel",

    # Validation
    "FieldError",
    "ValidationResult",
    "validate_flight",
    "validate_flight_update",
]
