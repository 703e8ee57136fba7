"""
Integration tests for the booking service.

Bookings run against in-memory SQLite with the in-process lock manager,
including a concurrent run that must not oversell a class.
"""

import threading
import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from flight_inventory.database import Booking, DatabaseConfig, FlightRepository
from flight_inventory.models.booking import BookingRequestModel
from flight_inventory.models.enums import TravelClass
from flight_inventory.models.flight import FlightCreateModel
from flight_inventory.services.booking_service import (
    BookingError,
    BookingNotFoundError,
    BookingService,
    ClassNotOfferedError,
    FlightNotFoundError,
    InsufficientSeatsError,
    InvalidTravelClassError,
)
from flight_inventory.services.lock_manager import LocalLockManager


DEPARTURE = datetime(2026, 12, 20, 6, 15)


@pytest.fixture
def db_config():
    config = DatabaseConfig("sqlite:///:memory:")
    config.create_tables()
    with config.get_session_context() as session:
        FlightRepository(session).create(FlightCreateModel(
            flight_number="QS1001",
            airline="Smartwings",
            origin_airport="PRG",
            origin_city="Prague",
            destination_airport="TFS",
            destination_city="Tenerife",
            departure_time=DEPARTURE,
            arrival_time=DEPARTURE + timedelta(hours=5, minutes=40),
            aircraft_type="Boeing 737-800",
            economy_price=Decimal("249.00"),
            economy_seats=5,
            business_price=Decimal("990.00"),
            business_seats=2,
        ))
    yield config
    config.close()


@pytest.fixture
def service(db_config):
    return BookingService(db_config, LocalLockManager(default_timeout_seconds=5.0))


class TestBook:

    def test_book_reserves_seats(self, service):
        booking = service.book("QS1001", "economy", 2, "Jana Novak")

        assert booking.booking_id is not None
        assert booking.travel_class == TravelClass.ECONOMY
        assert booking.seat_count == 2
        assert booking.total_price == Decimal("498.00")
        assert service.availability("QS1001")["economy"]["available"] == 3

    def test_book_request_model(self, service):
        request = BookingRequestModel(
            flight_number="QS1001", travel_class="business", seat_count=2, passenger_name="Petr Svoboda"
        )
        booking = service.book_request(request)

        assert booking.total_price == Decimal("1980.00")
        assert service.availability("QS1001")["business"]["available"] == 0

    def test_insufficient_seats(self, service):
        with pytest.raises(InsufficientSeatsError) as exc_info:
            service.book("QS1001", "business", 3, "Jana Novak")

        assert exc_info.value.available == 2
        assert exc_info.value.requested == 3
        assert service.availability("QS1001")["business"]["available"] == 2

    def test_class_not_offered(self, service):
        with pytest.raises(ClassNotOfferedError):
            service.book("QS1001", "first", 1, "Jana Novak")

    def test_unknown_class(self, service):
        with pytest.raises(InvalidTravelClassError):
            service.book("QS1001", "premium", 1, "Jana Novak")

    def test_unknown_flight(self, service):
        with pytest.raises(FlightNotFoundError):
            service.book("QS0000", "economy", 1, "Jana Novak")

    def test_seat_count_must_be_positive(self, service):
        with pytest.raises(ValueError):
            service.book("QS1001", "economy", 0, "Jana Novak")

    def test_errors_share_base_class(self):
        assert issubclass(InsufficientSeatsError, BookingError)
        assert issubclass(FlightNotFoundError, BookingError)

    def test_book_refreshes_updated_at(self, service, db_config):
        stamp = datetime(2026, 10, 19, 12, 0)
        service.book("QS1001", "economy", 1, "Jana Novak", now=stamp)

        with db_config.get_session_context() as session:
            flight = FlightRepository(session).get_by_number("QS1001")
            assert flight.updated_at == stamp
            assert flight.created_at != stamp


class TestCancel:

    def test_cancel_releases_seats(self, service, db_config):
        booking = service.book("QS1001", "economy", 4, "Jana Novak")
        assert service.availability("QS1001")["economy"]["available"] == 1

        service.cancel(booking.booking_id)

        assert service.availability("QS1001")["economy"]["available"] == 5
        with db_config.get_session_context() as session:
            assert session.get(Booking, booking.booking_id) is None

    def test_cancel_unknown_booking(self, service):
        with pytest.raises(BookingNotFoundError):
            service.cancel(12345)


class TestConcurrentBooking:

    def test_does_not_oversell(self, service):
        successes, failures = [], []

        def attempt(n):
            try:
                successes.append(service.book("QS1001", "economy", 1, f"Passenger {n}"))
            except InsufficientSeatsError as e:
                failures.append(e)

        threads = [threading.Thread(target=attempt, args=(n,)) for n in range(12)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(successes) == 5
        assert len(failures) == 7
        assert service.availability("QS1001")["economy"]["available"] == 0
