"""
Booking service: the caller that turns seat inventory into bookings.

SeatInventory never rejects a reservation; it floors at zero. The service is
where "not enough seats" becomes an error: it checks has_available() and
reserves under a per-flight lock, so the check and the reservation happen
as one step.
"""

import logging
from datetime import datetime
from typing import Optional

from ..database.config import DatabaseConfig
from ..database.models import Booking, Flight
from ..database.repository import FlightRepository
from ..models.booking import BookingModel, BookingRequestModel
from ..models.enums import TravelClass
from .lock_manager import FlightLockManager, LocalLockManager

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for booking failures."""
    pass


class FlightNotFoundError(BookingError):
    def __init__(self, flight_number: str):
        super().__init__(f"Flight {flight_number} not found")
        self.flight_number = flight_number


class BookingNotFoundError(BookingError):
    def __init__(self, booking_id: int):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class InvalidTravelClassError(BookingError):
    def __init__(self, travel_class):
        super().__init__(f"Unknown travel class: {travel_class!r}")
        self.travel_class = travel_class


class ClassNotOfferedError(BookingError):
    def __init__(self, flight_number: str, travel_class: TravelClass):
        super().__init__(f"Flight {flight_number} does not offer {travel_class.value} class")
        self.flight_number = flight_number
        self.travel_class = travel_class


class InsufficientSeatsError(BookingError):
    def __init__(self, flight_number: str, travel_class: TravelClass, requested: int, available: int):
        super().__init__(
            f"Flight {flight_number} has {available} {travel_class.value} seats, "
            f"{requested} requested"
        )
        self.flight_number = flight_number
        self.travel_class = travel_class
        self.requested = requested
        self.available = available


class BookingService:
    """Books and cancels seats against flight inventory."""

    def __init__(self, db_config: DatabaseConfig, lock_manager: Optional[FlightLockManager] = None):
        self.db_config = db_config
        self.lock_manager = lock_manager or LocalLockManager()

    def book(
        self,
        flight_number: str,
        travel_class,
        seat_count: int,
        passenger_name: str,
        now: Optional[datetime] = None,
    ) -> BookingModel:
        """
        Reserve seats and record the booking.

        Raises:
            ValueError: seat_count below 1
            InvalidTravelClassError: travel_class is not economy, business or first
            FlightNotFoundError: no flight with that number
            ClassNotOfferedError: the class has no price on this flight
            InsufficientSeatsError: fewer seats available than requested
            LockAcquisitionError: another booking holds the flight for too long
        """
        if seat_count < 1:
            raise ValueError("seat_count must be at least 1")
        resolved = TravelClass.parse(travel_class)
        if resolved is None:
            raise InvalidTravelClassError(travel_class)

        with self.lock_manager.hold(flight_number):
            with self.db_config.get_session_context() as session:
                repository = FlightRepository(session)
                flight = repository.get_by_number(flight_number)
                if flight is None:
                    raise FlightNotFoundError(flight_number)

                inventory = flight.seat_inventory()
                price = inventory.price_for(resolved)
                if price is None:
                    raise ClassNotOfferedError(flight_number, resolved)
                if not inventory.has_available(resolved, seat_count):
                    raise InsufficientSeatsError(
                        flight_number, resolved, seat_count, inventory.available(resolved)
                    )

                inventory.reserve(resolved, seat_count)
                flight.apply_inventory(inventory)

                booking = Booking(
                    flight_id=flight.flight_id,
                    passenger_name=passenger_name,
                    travel_class=resolved,
                    seat_count=seat_count,
                    total_price=price * seat_count,
                    booked_at=now or datetime.now(),
                )
                session.add(booking)
                repository.update(flight, now)

                logger.info(
                    f"Booked {seat_count} {resolved.value} seat(s) on {flight_number} "
                    f"for {passenger_name} (booking {booking.booking_id})"
                )
                return BookingModel.model_validate(booking)

    def book_request(self, request: BookingRequestModel) -> BookingModel:
        return self.book(
            request.flight_number,
            request.travel_class,
            request.seat_count,
            request.passenger_name,
        )

    def cancel(self, booking_id: int, now: Optional[datetime] = None) -> None:
        """
        Delete a booking and give its seats back to the flight.

        Raises:
            BookingNotFoundError: no booking with that id
        """
        with self.db_config.get_session_context() as session:
            flight_number = (
                session.query(Flight.flight_number)
                .join(Booking, Booking.flight_id == Flight.flight_id)
                .filter(Booking.booking_id == booking_id)
                .scalar()
            )
        if flight_number is None:
            raise BookingNotFoundError(booking_id)

        with self.lock_manager.hold(flight_number):
            with self.db_config.get_session_context() as session:
                repository = FlightRepository(session)
                booking = session.get(Booking, booking_id)
                # Cancelled concurrently while we waited for the lock
                if booking is None:
                    raise BookingNotFoundError(booking_id)
                travel_class, seat_count = booking.travel_class, booking.seat_count

                flight = repository.get(booking.flight_id)
                flight.release_seats(travel_class, seat_count)
                session.delete(booking)
                repository.update(flight, now)

        logger.info(
            f"Cancelled booking {booking_id}: released {seat_count} "
            f"{travel_class.value} seat(s) on {flight_number}"
        )

    def availability(self, flight_number: str) -> dict:
        """Per-class snapshot of a flight's inventory."""
        with self.db_config.get_session_context() as session:
            flight = FlightRepository(session).get_by_number(flight_number)
            if flight is None:
                raise FlightNotFoundError(flight_number)
            return flight.seat_inventory().snapshot()
