"""Field-level change tracking for event updates.

``diff`` compares canonical JSON snapshots of each tracked field, so two
profile lists with the same ids in the same order are equal and instants
compare by value regardless of the offset they were expressed in.
"""
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from tzevents.services.candidate import EventCandidate, TRACKED_FIELDS


@dataclass(frozen=True)
class ChangeEntry:
    field: str
    old_value: Any
    new_value: Any
    updated_at: datetime
    updated_by: Optional[str] = None


def format_instant(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def snapshot(field: str, value: Any) -> Any:
    """JSON-safe frozen copy of a field value as it is stored."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return format_instant(value)
    if field == "profiles":
        return [str(p) for p in value]
    return value


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True)


def diff(
    previous: EventCandidate,
    proposed: Union[EventCandidate, Mapping[str, Any]],
    actor: Optional[str],
    now: datetime,
) -> list[ChangeEntry]:
    """One entry per tracked field whose value actually changed, in field order."""
    if isinstance(proposed, EventCandidate):
        proposed = proposed.tracked_values()
    before = previous.tracked_values()

    entries = []
    for field in TRACKED_FIELDS:
        if field not in proposed:
            continue
        old_value = snapshot(field, before[field])
        new_value = snapshot(field, proposed[field])
        if _canonical(old_value) != _canonical(new_value):
            entries.append(ChangeEntry(
                field=field,
                old_value=old_value,
                new_value=new_value,
                updated_at=now,
                updated_by=actor,
            ))
    return entries
