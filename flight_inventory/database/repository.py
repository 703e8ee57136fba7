"""
Flight repository.

Wraps a SQLAlchemy session with the flight operations the rest of the
package needs, and is the one place that calls the lifecycle stamps.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.enums import FlightStatus
from ..models.flight import FlightCreateModel, FlightUpdateModel
from .lifecycle import on_create, on_update
from .models import Booking, Flight

logger = logging.getLogger(__name__)


class FlightRepository:
    """Persistence operations for Flight records and their bookings."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, flight: Flight, now: Optional[datetime] = None) -> Flight:
        """
        Insert a new flight.

        Stamps audit timestamps and initializes the seat inventory before
        flushing, so the returned flight carries its generated flight_id.
        """
        on_create(flight, now)
        self.session.add(flight)
        self.session.flush()
        logger.info(f"Added flight {flight.flight_number} (id={flight.flight_id})")
        return flight

    def create(self, data: FlightCreateModel, now: Optional[datetime] = None) -> Flight:
        """Insert a flight from a validated create schema."""
        return self.add(Flight(**data.model_dump()), now)

    def get(self, flight_id: int) -> Optional[Flight]:
        return self.session.get(Flight, flight_id)

    def get_by_number(self, flight_number: str) -> Optional[Flight]:
        return (
            self.session.query(Flight)
            .filter(Flight.flight_number == flight_number)
            .one_or_none()
        )

    def list_flights(self, status: Optional[FlightStatus] = None) -> List[Flight]:
        query = self.session.query(Flight)
        if status is not None:
            query = query.filter(Flight.status == status)
        return query.order_by(Flight.departure_time, Flight.flight_number).all()

    def update(self, flight: Flight, now: Optional[datetime] = None) -> Flight:
        """Flush pending changes to a flight after refreshing updated_at."""
        on_update(flight, now)
        self.session.flush()
        return flight

    def apply_changes(
        self, flight: Flight, changes: FlightUpdateModel, now: Optional[datetime] = None
    ) -> Flight:
        """
        Apply the fields explicitly set on an update schema, then update.

        Raises:
            PydanticCustomError: schedule_order, if the merged arrival time
                would not be after the merged departure time; the flight is
                left untouched
        """
        changes.check_against(flight)
        for name, value in changes.model_dump(exclude_unset=True).items():
            setattr(flight, name, value)
        return self.update(flight, now)

    def delete(self, flight: Flight) -> None:
        """Delete a flight; its bookings go with it via ON DELETE CASCADE."""
        flight_number = flight.flight_number
        self.session.delete(flight)
        self.session.flush()
        # Bookings removed by the database are still in the identity map
        self.session.expire_all()
        logger.info(f"Deleted flight {flight_number}")

    def bookings_for(self, flight: Flight) -> List[Booking]:
        """Query the bookings referencing a flight."""
        return (
            self.session.query(Booking)
            .filter(Booking.flight_id == flight.flight_id)
            .order_by(Booking.booking_id)
            .all()
        )
