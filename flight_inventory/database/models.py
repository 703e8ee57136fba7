"""
SQLAlchemy database models for the flight inventory package.

This module defines the persisted representation of:
- Flight: schedule, per-class prices, seat totals and available counts
- Booking: seats of one travel class held on one flight

Available seat counts are persisted derived state. They are only changed by
round-tripping through SeatInventory (seat_inventory() / apply_inventory()).
Bookings reference their flight by foreign key only; deleting a flight
removes its bookings through ON DELETE CASCADE.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import declarative_base, relationship, validates
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..models.enums import FlightStatus, TravelClass
from ..services.seat_inventory import ClassInventory, SeatInventory

# Create the declarative base for all models
Base = declarative_base()


class Flight(Base):
    """
    Flight model, the aggregate root for seat inventory.

    Identity is the flight number: two Flight objects compare equal when their
    flight numbers match, whatever their surrogate keys.
    """
    __tablename__ = 'flights'
    __table_args__ = (
        CheckConstraint('economy_price > 0', name='ck_flights_economy_price_positive'),
        CheckConstraint('business_price IS NULL OR business_price > 0', name='ck_flights_business_price_positive'),
        CheckConstraint('first_class_price IS NULL OR first_class_price > 0', name='ck_flights_first_class_price_positive'),
        CheckConstraint('economy_seats >= 1', name='ck_flights_economy_seats_min'),
        CheckConstraint('business_seats >= 0', name='ck_flights_business_seats_min'),
        CheckConstraint('first_class_seats >= 0', name='ck_flights_first_class_seats_min'),
        CheckConstraint('economy_available BETWEEN 0 AND economy_seats', name='ck_flights_economy_available_bounds'),
        CheckConstraint('business_available BETWEEN 0 AND business_seats', name='ck_flights_business_available_bounds'),
        CheckConstraint('first_class_available BETWEEN 0 AND first_class_seats', name='ck_flights_first_class_available_bounds'),
    )

    # Primary key
    flight_id = Column(Integer, primary_key=True, autoincrement=True)

    # Flight identification and route
    flight_number = Column(String(10), unique=True, nullable=False, index=True)  # e.g. 'QS1234'
    airline = Column(String(50), nullable=False)
    origin_airport = Column(String(10), nullable=False, index=True)
    origin_city = Column(String(100), nullable=False)
    destination_airport = Column(String(10), nullable=False, index=True)
    destination_city = Column(String(100), nullable=False)

    # Schedule
    departure_time = Column(DateTime, nullable=False, index=True)
    arrival_time = Column(DateTime, nullable=False)
    aircraft_type = Column(String(50), nullable=False)

    # Fares; NULL business/first price means the class is not offered
    economy_price = Column(Numeric(10, 2), nullable=False)
    business_price = Column(Numeric(10, 2), nullable=True)
    first_class_price = Column(Numeric(10, 2), nullable=True)

    # Seat totals
    economy_seats = Column(Integer, nullable=False)
    business_seats = Column(Integer, nullable=False, default=0)
    first_class_seats = Column(Integer, nullable=False, default=0)

    # Available seats (persisted derived state)
    economy_available = Column(Integer, nullable=True)
    business_available = Column(Integer, nullable=True)
    first_class_available = Column(Integer, nullable=True)

    # Operational details
    status = Column(
        SAEnum(FlightStatus, name='flight_status', native_enum=False, length=20),
        nullable=False,
        default=FlightStatus.SCHEDULED,
    )
    gate = Column(String(10), nullable=True)
    terminal = Column(String(10), nullable=True)
    notes = Column(String(500), nullable=True)

    # Audit timestamps, stamped by database.lifecycle
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    # Read-only, lazily loaded view of the bookings referencing this flight
    bookings = relationship(
        "Booking",
        viewonly=True,
        lazy="select",
        order_by="Booking.booking_id",
    )

    def __init__(self, **kwargs):
        kwargs.setdefault('business_seats', 0)
        kwargs.setdefault('first_class_seats', 0)
        kwargs.setdefault('status', FlightStatus.SCHEDULED)
        super().__init__(**kwargs)

    @validates('created_at')
    def _validate_created_at(self, key, value):
        if self.created_at is not None and value != self.created_at:
            raise ValueError("created_at cannot be changed once set")
        return value

    # Seat inventory round trip

    def seat_inventory(self) -> SeatInventory:
        """Build a SeatInventory from this row's counters and prices."""
        return SeatInventory(
            economy=ClassInventory(
                total=self.economy_seats or 0,
                available=self.economy_available or 0,
                price=self.economy_price,
            ),
            business=ClassInventory(
                total=self.business_seats or 0,
                available=self.business_available or 0,
                price=self.business_price,
            ),
            first=ClassInventory(
                total=self.first_class_seats or 0,
                available=self.first_class_available or 0,
                price=self.first_class_price,
            ),
        )

    def apply_inventory(self, inventory: SeatInventory) -> None:
        """Write the inventory's available counts back onto the row."""
        self.economy_available = inventory.available(TravelClass.ECONOMY)
        self.business_available = inventory.available(TravelClass.BUSINESS)
        self.first_class_available = inventory.available(TravelClass.FIRST)

    # Business methods

    def has_seats_available(self, travel_class, requested_seats: int) -> bool:
        return self.seat_inventory().has_available(travel_class, requested_seats)

    def price_for_class(self, travel_class) -> Optional[Decimal]:
        return self.seat_inventory().price_for(travel_class)

    def reserve_seats(self, travel_class, seats: int) -> None:
        inventory = self.seat_inventory()
        inventory.reserve(travel_class, seats)
        self.apply_inventory(inventory)

    def release_seats(self, travel_class, seats: int) -> None:
        inventory = self.seat_inventory()
        inventory.release(travel_class, seats)
        self.apply_inventory(inventory)

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Flight):
            return NotImplemented
        return self.flight_number == other.flight_number

    def __hash__(self):
        return hash(self.flight_number)

    def __repr__(self):
        status = getattr(self.status, "value", self.status)
        return (
            f"<Flight(id={self.flight_id}, flight_number='{self.flight_number}', "
            f"origin_city='{self.origin_city}', destination_city='{self.destination_city}', "
            f"departure_time={self.departure_time}, status={status})>"
        )


class Booking(Base):
    """
    Booking model: seats of one travel class held on one flight.

    Holds only the flight's key; the flight object is looked up through the
    repository when needed.
    """
    __tablename__ = 'bookings'
    __table_args__ = (
        CheckConstraint('seat_count >= 1', name='ck_bookings_seat_count_min'),
    )

    # Primary key
    booking_id = Column(Integer, primary_key=True, autoincrement=True)

    # Booking details
    flight_id = Column(
        Integer,
        ForeignKey('flights.flight_id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    passenger_name = Column(String(100), nullable=False)
    travel_class = Column(
        SAEnum(
            TravelClass,
            name='travel_class',
            native_enum=False,
            length=10,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    seat_count = Column(Integer, nullable=False, default=1)
    total_price = Column(Numeric(10, 2), nullable=False)
    booked_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self):
        travel_class = getattr(self.travel_class, "value", self.travel_class)
        return (
            f"<Booking(id={self.booking_id}, flight_id={self.flight_id}, "
            f"class='{travel_class}', seats={self.seat_count})>"
        )


def create_all_tables(engine):
    """
    Create all database tables using the provided SQLAlchemy engine.

    Args:
        engine: SQLAlchemy engine instance
    """
    Base.metadata.create_all(bind=engine)


__all__ = [
    'Base',
    'Flight',
    'Booking',
    'create_all_tables',
]
