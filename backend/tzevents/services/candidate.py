"""Immutable event candidate used by the validate -> diff -> commit pipeline."""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

# Audit-tracked fields in the order change entries are emitted.
TRACKED_FIELDS = (
    "title",
    "description",
    "startDateTime",
    "endDateTime",
    "timezone",
    "profiles",
)

FIELD_ATTRIBUTES = {
    "title": "title",
    "description": "description",
    "startDateTime": "start_date_time",
    "endDateTime": "end_date_time",
    "timezone": "timezone",
    "profiles": "profiles",
}


@dataclass(frozen=True)
class EventCandidate:
    """A full proposed event state, never mutated in place."""

    title: Optional[str] = None
    description: Optional[str] = None
    profiles: tuple[str, ...] = ()
    timezone: Optional[str] = None
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None

    @classmethod
    def from_record(cls, record) -> "EventCandidate":
        return cls(
            title=record.title,
            description=record.description,
            profiles=tuple(record.profiles),
            timezone=record.timezone,
            start_date_time=record.start_date_time,
            end_date_time=record.end_date_time,
        )

    def with_changes(self, **changes: Any) -> "EventCandidate":
        if "profiles" in changes and changes["profiles"] is not None:
            changes["profiles"] = tuple(changes["profiles"])
        return replace(self, **changes).normalized()

    def normalized(self) -> "EventCandidate":
        title = self.title.strip() if isinstance(self.title, str) else self.title
        description = self.description.strip() if isinstance(self.description, str) else self.description
        timezone = self.timezone.strip() if isinstance(self.timezone, str) else self.timezone
        return replace(
            self,
            title=title,
            description=description or None,
            timezone=timezone,
            profiles=tuple(self.profiles or ()),
        )

    def tracked_values(self) -> dict[str, Any]:
        return {field: getattr(self, attr) for field, attr in FIELD_ATTRIBUTES.items()}
