"""
Flight inventory: flight records with per-class seat bookkeeping.

The package is organised around three concerns:
1. Seat inventory (reserve, release and availability per travel class)
2. Persistence of Flight and Booking records with SQLAlchemy
3. Per-flight locking so concurrent bookings cannot oversell a class

Validation of incoming flight data is expressed as explicit pydantic schemas
that report field/message pairs instead of raising.
"""

__version__ = "0.1.0"
