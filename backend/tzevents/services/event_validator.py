"""Event and profile invariant checks.

Every rule runs on every call so callers can surface all problems in one
response; nothing here short-circuits on the first failure.
"""
from datetime import datetime
from typing import Optional

from tzevents.errors import FieldError, ValidationFailed
from tzevents.services.candidate import EventCandidate
from tzevents.services.timezone_service import is_valid_timezone

TITLE_MAX = 200
DESCRIPTION_MAX = 1000
PROFILE_NAME_MIN = 2
PROFILE_NAME_MAX = 100


def _is_instant(value) -> bool:
    return isinstance(value, datetime) and value.tzinfo is not None


def validate(candidate: EventCandidate) -> list[FieldError]:
    errors: list[FieldError] = []

    title = candidate.title.strip() if isinstance(candidate.title, str) else None
    if not title:
        errors.append(FieldError("title", "Event title is required"))
    elif len(title) > TITLE_MAX:
        errors.append(FieldError("title", f"Title cannot exceed {TITLE_MAX} characters"))

    if candidate.description and len(candidate.description) > DESCRIPTION_MAX:
        errors.append(FieldError("description", f"Description cannot exceed {DESCRIPTION_MAX} characters"))

    if not candidate.profiles:
        errors.append(FieldError("profiles", "At least one profile is required"))

    if not candidate.timezone:
        errors.append(FieldError("timezone", "Timezone is required"))
    elif not is_valid_timezone(candidate.timezone):
        errors.append(FieldError("timezone", f"Unknown timezone: {candidate.timezone!r}"))

    start, end = candidate.start_date_time, candidate.end_date_time
    if start is None:
        errors.append(FieldError("startDateTime", "Start date/time is required"))
    elif not _is_instant(start):
        errors.append(FieldError("startDateTime", "Start date/time must be an absolute instant"))
    if end is None:
        errors.append(FieldError("endDateTime", "End date/time is required"))
    elif not _is_instant(end):
        errors.append(FieldError("endDateTime", "End date/time must be an absolute instant"))
    elif _is_instant(start) and end <= start:
        errors.append(FieldError("endDateTime", "End date/time must be after start date/time"))

    return errors


def validate_or_raise(candidate: EventCandidate) -> None:
    errors = validate(candidate)
    if errors:
        raise ValidationFailed(errors)


def merge_errors(primary: list[FieldError], secondary: list[FieldError], skip: frozenset = frozenset()) -> list[FieldError]:
    """Append ``secondary`` errors for fields not already reported or skipped."""
    seen = {e.field for e in primary} | set(skip)
    return list(primary) + [e for e in secondary if e.field not in seen]


def validate_profile(name: Optional[str], timezone: Optional[str]) -> list[FieldError]:
    errors: list[FieldError] = []
    cleaned = name.strip() if isinstance(name, str) else ""
    if not cleaned:
        errors.append(FieldError("name", "Name is required"))
    elif len(cleaned) < PROFILE_NAME_MIN:
        errors.append(FieldError("name", f"Name must be at least {PROFILE_NAME_MIN} characters"))
    elif len(cleaned) > PROFILE_NAME_MAX:
        errors.append(FieldError("name", f"Name cannot exceed {PROFILE_NAME_MAX} characters"))

    if not timezone:
        errors.append(FieldError("timezone", "Timezone is required"))
    elif not is_valid_timezone(timezone):
        errors.append(FieldError("timezone", f"Unknown timezone: {timezone!r}"))
    return errors
