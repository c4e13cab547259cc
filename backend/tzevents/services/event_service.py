"""Core event service: composes conversion, validation, change tracking and storage.

Responsibilities:
- Wall-clock start/end + event timezone -> UTC instants
- Full field-error collection before anything is persisted
- Referential checks on profile, creator and actor references
- All-or-nothing updates with an appended field-level change log
- Read-time resolution of profile references and per-viewer rendering
"""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from tzevents.config import settings
from tzevents.errors import FieldError, InvalidDateTime, ValidationFailed
from tzevents.repositories.event_repository import EventFilter, EventRecord, EventRepository
from tzevents.repositories.profile_repository import ProfileRef, ProfileRepository
from tzevents.services.candidate import EventCandidate
from tzevents.services.event_validator import merge_errors, validate
from tzevents.services.timezone_service import (
    ensure_timezone,
    is_valid_timezone,
    parse_date_time,
    to_instant,
    to_local,
)

logger = logging.getLogger(__name__)

_DATETIME_FIELDS = (("start_date_time", "startDateTime"), ("end_date_time", "endDateTime"))


def _resolve_instants(
    raw: Mapping[str, Any],
    zone: Optional[str],
) -> tuple[dict[str, Optional[datetime]], list[FieldError], frozenset]:
    """Convert whichever of start/end are present in ``raw``.

    Returns the converted values, conversion errors, and the fields that
    could not be resolved only because the zone itself is unusable (the
    timezone error already covers those).
    """
    values: dict[str, Optional[datetime]] = {}
    errors: list[FieldError] = []
    unresolved = set()
    zone_ok = is_valid_timezone(zone)

    for attr, field in _DATETIME_FIELDS:
        if attr not in raw:
            continue
        value = raw[attr]
        if value is None or (isinstance(value, str) and not value.strip()):
            values[attr] = None
            continue
        try:
            parsed = parse_date_time(value, field=field)
        except InvalidDateTime as exc:
            errors.extend(exc.errors)
            values[attr] = None
            continue
        if parsed.tzinfo is not None:
            values[attr] = parsed.astimezone(timezone.utc)
        elif zone_ok:
            values[attr] = to_instant(parsed, zone, field=field)
        else:
            values[attr] = None
            unresolved.add(field)
    return values, errors, frozenset(unresolved)


def _reference_errors(profiles: ProfileRepository, field: str, ids: Iterable[Optional[str]]) -> list[FieldError]:
    return [FieldError(field, f"Profile not found: {pid}") for pid in profiles.missing(ids)]


class EventService:
    """High level operations for events, one instance per request."""

    def __init__(self, db: Session, deadline: Optional[float] = None) -> None:
        self.events = EventRepository(db, deadline)
        self.profiles = ProfileRepository(db, deadline)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_events(self, filters: Optional[EventFilter] = None, display_timezone: Optional[str] = None) -> list[dict]:
        if display_timezone:
            ensure_timezone(display_timezone, field="displayTimezone")
        records = self.events.find(filters)
        refs = self.profiles.resolve_many(_referenced_ids(records))
        return [self._present(r, refs, display_timezone) for r in records]

    def get_event(self, event_id: str, display_timezone: Optional[str] = None) -> dict:
        if display_timezone:
            ensure_timezone(display_timezone, field="displayTimezone")
        return self._present_one(self.events.get_by_id(event_id), display_timezone)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create_event(self, data: Mapping[str, Any]) -> dict:
        """Convert, validate and persist a new event.

        ``data`` uses attribute names (``start_date_time``...). A missing
        timezone falls back to the configured default; an explicit blank
        one is an error.
        """
        zone = data.get("timezone", settings.DEFAULT_TIMEZONE)
        instants, errors, unresolved = _resolve_instants(
            {attr: data.get(attr) for attr, _ in _DATETIME_FIELDS}, zone
        )
        candidate = EventCandidate(
            title=data.get("title"),
            description=data.get("description"),
            profiles=tuple(data.get("profiles") or ()),
            timezone=zone,
            start_date_time=instants["start_date_time"],
            end_date_time=instants["end_date_time"],
        ).normalized()

        errors = merge_errors(errors, validate(candidate), skip=unresolved)
        errors += _reference_errors(self.profiles, "profiles", candidate.profiles)
        created_by = data.get("created_by")
        errors += _reference_errors(self.profiles, "createdBy", [created_by])
        if errors:
            logger.warning("Rejected event create: %s", [e.field for e in errors])
            raise ValidationFailed(errors)

        if is_valid_timezone(candidate.timezone):
            candidate = candidate.with_changes(timezone=ensure_timezone(candidate.timezone))
        record = self.events.create(candidate, created_by=created_by)
        return self._present_one(record)

    def update_event(self, event_id: str, changes: Mapping[str, Any], updated_by: Optional[str] = None) -> dict:
        """Apply any subset of fields; every violation aborts the whole update.

        Wall-clock start/end values are read against the new timezone when
        one is supplied, otherwise the stored one. Changing only the
        timezone keeps the stored instants.
        """
        current = self.events.get_by_id(event_id)
        zone = changes.get("timezone", current.timezone)
        instants, errors, unresolved = _resolve_instants(changes, zone)

        partial: dict[str, Any] = {k: changes[k] for k in ("title", "description", "timezone") if k in changes}
        if "profiles" in changes:
            partial["profiles"] = tuple(changes["profiles"] or ())
        partial.update(instants)

        merged = EventCandidate.from_record(current).with_changes(**partial)
        errors = merge_errors(errors, validate(merged), skip=unresolved)
        if "profiles" in partial:
            errors += _reference_errors(self.profiles, "profiles", partial["profiles"])
        errors += _reference_errors(self.profiles, "updatedBy", [updated_by])
        if errors:
            logger.warning("Rejected update of event %s: %s", event_id, [e.field for e in errors])
            raise ValidationFailed(errors)

        if "timezone" in partial:
            partial["timezone"] = ensure_timezone(merged.timezone)
        record = self.events.update(
            event_id,
            lambda candidate: candidate.with_changes(**partial),
            actor_id=updated_by,
        )
        return self._present_one(record)

    def delete_event(self, event_id: str) -> dict:
        record = self.events.delete(event_id)
        return self._present_one(record)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def _present_one(self, record: EventRecord, display_timezone: Optional[str] = None) -> dict:
        refs = self.profiles.resolve_many(_referenced_ids([record]))
        return self._present(record, refs, display_timezone)

    @staticmethod
    def _present(record: EventRecord, refs: Mapping[str, ProfileRef], display_timezone: Optional[str] = None) -> dict:
        view_zone = display_timezone or record.timezone
        creator = refs.get(record.created_by) if record.created_by else None
        return {
            "id": record.event_id,
            "title": record.title,
            "description": record.description,
            "profiles": [refs[pid].detail() for pid in record.profiles if pid in refs],
            "timezone": record.timezone,
            "start_date_time": record.start_date_time,
            "end_date_time": record.end_date_time,
            "display_timezone": view_zone,
            "start_local": to_local(record.start_date_time, view_zone),
            "end_local": to_local(record.end_date_time, view_zone),
            "created_by": creator.summary() if creator else None,
            "update_logs": [
                {
                    "field": entry.field,
                    "old_value": entry.old_value,
                    "new_value": entry.new_value,
                    "updated_at": entry.updated_at,
                    "updated_by": _actor(entry.updated_by, refs),
                }
                for entry in record.update_logs
            ],
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }


def _actor(profile_id: Optional[str], refs: Mapping[str, ProfileRef]) -> Optional[dict]:
    if not profile_id:
        return None
    ref = refs.get(profile_id)
    # Snapshot ids stay visible even if the profile can no longer be resolved.
    return ref.summary() if ref else {"id": profile_id, "name": None}


def _referenced_ids(records: Iterable[EventRecord]) -> set[str]:
    ids: set[str] = set()
    for record in records:
        ids.update(record.profiles)
        if record.created_by:
            ids.add(record.created_by)
        ids.update(e.updated_by for e in record.update_logs if e.updated_by)
    return ids


