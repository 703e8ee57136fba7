"""
Structured validation of flight payloads.

validate_flight() runs the FlightCreateModel schema and reports every problem
as a (field, message) pair instead of raising, so callers can render or log
the full list at once.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticCustomError

from .flight import FlightCreateModel, FlightUpdateModel

# Per-field messages keyed by constraint kind
FIELD_MESSAGES: Dict[str, Dict[str, str]] = {
    "flight_number": {
        "required": "Flight number is required",
        "max_length": "Flight number must be at most 10 characters",
    },
    "airline": {
        "required": "Airline is required",
        "max_length": "Airline name must be at most 50 characters",
    },
    "origin_airport": {
        "required": "Origin airport is required",
        "max_length": "Origin airport code must be at most 10 characters",
    },
    "origin_city": {
        "required": "Origin city is required",
        "max_length": "Origin city must be at most 100 characters",
    },
    "destination_airport": {
        "required": "Destination airport is required",
        "max_length": "Destination airport code must be at most 10 characters",
    },
    "destination_city": {
        "required": "Destination city is required",
        "max_length": "Destination city must be at most 100 characters",
    },
    "departure_time": {"required": "Departure time is required"},
    "arrival_time": {
        "required": "Arrival time is required",
        "order": "Arrival time must be after departure time",
    },
    "aircraft_type": {
        "required": "Aircraft type is required",
        "max_length": "Aircraft type must be at most 50 characters",
    },
    "economy_price": {
        "required": "Economy price is required",
        "positive": "Economy price must be greater than 0",
    },
    "business_price": {"positive": "Business price must be greater than 0"},
    "first_class_price": {"positive": "First class price must be greater than 0"},
    "status": {"required": "Status is required"},
    "economy_seats": {
        "required": "Economy seats are required",
        "minimum": "Economy seats must be at least 1",
    },
    "business_seats": {"minimum": "Business seats cannot be negative"},
    "first_class_seats": {"minimum": "First class seats cannot be negative"},
    "gate": {"max_length": "Gate must be at most 10 characters"},
    "terminal": {"max_length": "Terminal must be at most 10 characters"},
    "notes": {"max_length": "Notes must be at most 500 characters"},
}

_ERROR_KINDS = {
    "missing": "required",
    "string_too_short": "required",
    "value_required": "required",
    "string_too_long": "max_length",
    "greater_than": "positive",
    "greater_than_equal": "minimum",
    "schedule_order": "order",
}


@dataclass(frozen=True)
class FieldError:
    """A single validation failure."""
    field: str
    message: str


@dataclass
class ValidationResult:
    """Outcome of validating a payload; empty errors means valid."""
    errors: List[FieldError] = field(default_factory=list)
    model: Optional[BaseModel] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def as_pairs(self) -> List[Tuple[str, str]]:
        return [(e.field, e.message) for e in self.errors]

    def messages_for(self, field_name: str) -> List[str]:
        return [e.message for e in self.errors if e.field == field_name]


def _to_field_error(error: Dict[str, Any]) -> FieldError:
    kind = _ERROR_KINDS.get(error["type"])
    if error["type"] == "schedule_order":
        field_name = "arrival_time"
    else:
        field_name = ".".join(str(part) for part in error["loc"]) or "__root__"
    if error.get("input", ...) is None:
        kind = "required"
    message = FIELD_MESSAGES.get(field_name, {}).get(kind) if kind else None
    return FieldError(field=field_name, message=message or error["msg"])


def _validate(schema: Type[BaseModel], data: Mapping[str, Any]) -> ValidationResult:
    try:
        model = schema.model_validate(dict(data))
    except ValidationError as e:
        return ValidationResult(errors=[_to_field_error(err) for err in e.errors()])
    return ValidationResult(model=model)


def validate_flight(data: Mapping[str, Any]) -> ValidationResult:
    """
    Validate a new-flight payload.

    Args:
        data: Raw field values keyed by column name

    Returns:
        ValidationResult with the parsed FlightCreateModel when valid, or the
        list of field/message pairs when not
    """
    return _validate(FlightCreateModel, data)


def validate_flight_update(data: Mapping[str, Any], current: Any = None) -> ValidationResult:
    """
    Validate a partial update payload.

    When the stored flight is given as current, the schedule is also checked
    with the update's times merged over the stored ones.
    """
    result = _validate(FlightUpdateModel, data)
    if result.is_valid and current is not None:
        try:
            result.model.check_against(current)
        except PydanticCustomError:
            return ValidationResult(errors=[
                FieldError("arrival_time", FIELD_MESSAGES["arrival_time"]["order"])
            ])
    return result
