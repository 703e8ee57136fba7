"""
Command line entry point for the flight inventory.

Usage:
    flight-inventory check-config
    flight-inventory init-db
    flight-inventory inventory QS1234
    flight-inventory book QS1234 business 2 "Jane Doe"
    flight-inventory cancel 17
"""

import logging

import typer
from rich.console import Console
from rich.table import Table
from rich import box

from .database.config import DatabaseConfig, initialize_database
from .services.booking_service import BookingError, BookingService
from .services.lock_manager import LockAcquisitionError, create_lock_manager
from .utils.config import AppConfig, get_config

app = typer.Typer(help="Flight seat inventory", add_completion=False)
console = Console()


def _setup(config: AppConfig) -> DatabaseConfig:
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return initialize_database(database_url=config.database_url, echo=config.db_echo)


def _service(config: AppConfig) -> BookingService:
    return BookingService(_setup(config), create_lock_manager(config))


@app.command("check-config")
def check_config():
    """Load and print the effective configuration."""
    try:
        config = get_config()
        db_config = DatabaseConfig(database_url=config.database_url, echo=config.db_echo)
    except ValueError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Configuration", box=box.SIMPLE)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in config.model_dump().items():
        if name == "valkey_password" and value:
            value = "***"
        table.add_row(name, str(value))
    table.add_row("database (resolved)", db_config.get_connection_info()["database_url"])
    console.print(table)


@app.command("init-db")
def init_db():
    """Create the flights and bookings tables."""
    db_config = _setup(get_config())
    console.print(f"✓ Tables ready on {db_config.get_connection_info()['database_url']}")


@app.command()
def inventory(flight_number: str):
    """Show seats and prices per travel class."""
    service = _service(get_config())
    try:
        snapshot = service.availability(flight_number)
    except BookingError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"Flight {flight_number}", box=box.ROUNDED)
    table.add_column("Class", style="cyan")
    table.add_column("Available", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Price", justify="right", style="green")
    for travel_class, row in snapshot.items():
        price = row["price"] if row["price"] is not None else "-"
        table.add_row(travel_class, str(row["available"]), str(row["total"]), str(price))
    console.print(table)


@app.command()
def book(flight_number: str, travel_class: str, seat_count: int, passenger_name: str):
    """Reserve seats on a flight."""
    service = _service(get_config())
    try:
        booking = service.book(flight_number, travel_class, seat_count, passenger_name)
    except (BookingError, LockAcquisitionError, ValueError) as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)
    console.print(
        f"✓ Booking {booking.booking_id}: {booking.seat_count} x {booking.travel_class.value} "
        f"for {booking.passenger_name}, total {booking.total_price}"
    )


@app.command()
def cancel(booking_id: int):
    """Cancel a booking and release its seats."""
    service = _service(get_config())
    try:
        service.cancel(booking_id)
    except (BookingError, LockAcquisitionError) as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"✓ Booking {booking_id} cancelled")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
