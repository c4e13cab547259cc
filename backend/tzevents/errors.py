"""Typed error kinds raised by services and repositories.

Routers never see store or conversion exceptions directly; everything
below the HTTP layer raises one of these and ``main`` maps them to
status codes in one place.
"""
from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class FieldError:
    """One problem attached to one input field."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class TzEventsError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def errors(self) -> list[FieldError]:
        return []


class InvalidTimezone(TzEventsError):
    status_code = 400
    error_code = "INVALID_TIMEZONE"

    def __init__(self, zone_id: Optional[str], field: str = "timezone"):
        super().__init__(f"Unknown timezone: {zone_id!r}")
        self.zone_id = zone_id
        self.field = field

    @property
    def errors(self) -> list[FieldError]:
        return [FieldError(self.field, self.message)]


class InvalidDateTime(TzEventsError):
    status_code = 400
    error_code = "INVALID_DATETIME"

    def __init__(self, value: object, field: str = "dateTime"):
        super().__init__(f"Invalid date/time: {value!r}")
        self.value = value
        self.field = field

    @property
    def errors(self) -> list[FieldError]:
        return [FieldError(self.field, self.message)]


class ValidationFailed(TzEventsError):
    """Carries every field error found, not just the first."""

    status_code = 400
    error_code = "VALIDATION_FAILED"

    def __init__(self, errors: list[FieldError], message: str = "Validation failed"):
        super().__init__(message)
        self._errors = list(errors)

    @property
    def errors(self) -> list[FieldError]:
        return list(self._errors)

    def fields(self) -> set[str]:
        return {e.field for e in self._errors}


class NotFound(TzEventsError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: object):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.identifier = identifier


class StoreUnavailable(TzEventsError):
    """Transient store failure; callers decide whether to retry."""

    status_code = 503
    error_code = "STORE_UNAVAILABLE"

    def __init__(self, message: str = "Database unavailable"):
        super().__init__(message)


class Timeout(TzEventsError):
    status_code = 504
    error_code = "TIMEOUT"

    def __init__(self, message: str = "Store operation timed out"):
        super().__init__(message)
