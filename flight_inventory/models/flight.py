"""
Flight-related Pydantic models for the flight inventory package.

This module holds the explicit field schema for flight records: the
constraints the persistence layer expects on create and update, plus the
read model used when a stored flight is handed back to callers.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from pydantic_core import PydanticCustomError

from .enums import FlightStatus, TravelClass

# Column length bounds shared with the SQLAlchemy table definition
FLIGHT_NUMBER_MAX = 10
AIRLINE_MAX = 50
AIRPORT_CODE_MAX = 10
CITY_MAX = 100
AIRCRAFT_TYPE_MAX = 50
GATE_MAX = 10
TERMINAL_MAX = 10
NOTES_MAX = 500

# Columns that are NOT NULL on the table and may not be cleared by an update
REQUIRED_ON_UPDATE = (
    "airline", "departure_time", "arrival_time", "aircraft_type", "economy_price", "status",
)


def check_schedule_order(departure: Optional[datetime], arrival: Optional[datetime]) -> None:
    """Raise a schedule_order error if both times are known and arrival is not later."""
    if departure is not None and arrival is not None and arrival <= departure:
        raise PydanticCustomError(
            "schedule_order", "Arrival time must be after departure time"
        )


class FlightCreateModel(BaseModel):
    """
    Schema for a new flight record.

    Required strings must be non-blank; whitespace is stripped before the
    length checks run. Business and first class prices may be omitted,
    meaning the class is not offered.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    flight_number: str = Field(..., min_length=1, max_length=FLIGHT_NUMBER_MAX, description="Flight number (unique)")
    airline: str = Field(..., min_length=1, max_length=AIRLINE_MAX, description="Operating airline")
    origin_airport: str = Field(..., min_length=1, max_length=AIRPORT_CODE_MAX, description="Origin airport code")
    origin_city: str = Field(..., min_length=1, max_length=CITY_MAX, description="Origin city")
    destination_airport: str = Field(..., min_length=1, max_length=AIRPORT_CODE_MAX, description="Destination airport code")
    destination_city: str = Field(..., min_length=1, max_length=CITY_MAX, description="Destination city")
    departure_time: datetime = Field(..., description="Scheduled departure time")
    arrival_time: datetime = Field(..., description="Scheduled arrival time")
    aircraft_type: str = Field(..., min_length=1, max_length=AIRCRAFT_TYPE_MAX, description="Aircraft model/type")

    economy_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="Economy fare")
    business_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2, description="Business fare, None if not offered")
    first_class_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2, description="First class fare, None if not offered")

    economy_seats: int = Field(..., ge=1, description="Total economy seats")
    business_seats: int = Field(default=0, ge=0, description="Total business seats")
    first_class_seats: int = Field(default=0, ge=0, description="Total first class seats")

    status: FlightStatus = Field(default=FlightStatus.SCHEDULED, description="Current flight status")
    gate: Optional[str] = Field(None, max_length=GATE_MAX, description="Gate assignment")
    terminal: Optional[str] = Field(None, max_length=TERMINAL_MAX, description="Terminal")
    notes: Optional[str] = Field(None, max_length=NOTES_MAX, description="Free-text notes")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @model_validator(mode="after")
    def check_schedule(self):
        check_schedule_order(self.departure_time, self.arrival_time)
        return self


class FlightUpdateModel(BaseModel):
    """
    Partial update of a flight. Only supplied fields are applied.

    Optional columns (business and first class prices, gate, terminal,
    notes) may be cleared with None; the rest may only be replaced.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    airline: Optional[str] = Field(None, min_length=1, max_length=AIRLINE_MAX)
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    aircraft_type: Optional[str] = Field(None, min_length=1, max_length=AIRCRAFT_TYPE_MAX)
    economy_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    business_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    first_class_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    status: Optional[FlightStatus] = None
    gate: Optional[str] = Field(None, max_length=GATE_MAX)
    terminal: Optional[str] = Field(None, max_length=TERMINAL_MAX)
    notes: Optional[str] = Field(None, max_length=NOTES_MAX)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator(*REQUIRED_ON_UPDATE, mode="before")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise PydanticCustomError("value_required", "{field} may not be cleared", {"field": info.field_name})
        return v

    @model_validator(mode="after")
    def check_schedule(self):
        check_schedule_order(self.departure_time, self.arrival_time)
        return self

    def check_against(self, flight) -> None:
        """Check the schedule that results from applying this update to a flight."""
        check_schedule_order(
            self.departure_time or flight.departure_time,
            self.arrival_time or flight.arrival_time,
        )


class FlightModel(BaseModel):
    """
    Read model of a stored flight.

    Built straight from the SQLAlchemy row via from_attributes.
    """
    model_config = ConfigDict(from_attributes=True)

    flight_id: int
    flight_number: str
    airline: str
    origin_airport: str
    origin_city: str
    destination_airport: str
    destination_city: str
    departure_time: datetime
    arrival_time: datetime
    aircraft_type: str
    economy_price: Decimal
    business_price: Optional[Decimal] = None
    first_class_price: Optional[Decimal] = None
    economy_seats: int
    business_seats: int = 0
    first_class_seats: int = 0
    economy_available: int
    business_available: int
    first_class_available: int
    status: FlightStatus = FlightStatus.SCHEDULED
    gate: Optional[str] = None
    terminal: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
