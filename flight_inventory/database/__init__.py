"""
Database package for the flight inventory.

This package provides the SQLAlchemy models, explicit lifecycle stamps,
the flight repository and database configuration.
"""

from .models import (
    Base,
    Flight,
    Booking,
    create_all_tables,
)

from .lifecycle import on_create, on_update

from .repository import FlightRepository

from .config import (
    DatabaseConfig,
    get_database_config,
    initialize_database
)

__all__ = [
    # Models
    'Base',
    'Flight',
    'Booking',
    'create_all_tables',

    # Lifecycle
    'on_create',
    'on_update',

    # Repository
    'FlightRepository',

    # Configuration
    'DatabaseConfig',
    'get_database_config',
    'initialize_database',
]
