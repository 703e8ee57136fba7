"""
Booking models for the flight inventory package.
"""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict

from .enums import TravelClass


class BookingRequestModel(BaseModel):
    """Request to hold seats of one class on a flight."""
    model_config = ConfigDict(str_strip_whitespace=True)

    flight_number: str = Field(..., min_length=1, max_length=10)
    travel_class: TravelClass = Field(default=TravelClass.ECONOMY)
    seat_count: int = Field(default=1, ge=1, description="Number of seats to reserve")
    passenger_name: str = Field(..., min_length=1, max_length=100)


class BookingModel(BaseModel):
    """Stored booking as returned by the booking service."""
    model_config = ConfigDict(from_attributes=True)

    booking_id: int
    flight_id: int
    passenger_name: str
    travel_class: TravelClass
    seat_count: int = Field(..., ge=1)
    total_price: Decimal = Field(..., ge=0, decimal_places=2)
    booked_at: datetime
