"""Event persistence with embedded profile list and change history.

Reads return ``EventRecord`` snapshots rather than live ORM objects, so a
record handed back to a caller (including a deleted one) never lazily
touches the session again.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from tzevents.database import utcnow
from tzevents.errors import NotFound, ValidationFailed
from tzevents.models.event import Event, EventProfile
from tzevents.models.event_change_log import EventChangeLog
from tzevents.repositories.base import SqlRepository, like_pattern
from tzevents.services.candidate import EventCandidate
from tzevents.services.change_tracker import ChangeEntry, diff
from tzevents.services.event_validator import validate

logger = logging.getLogger(__name__)

Mutator = Callable[[EventCandidate], EventCandidate]


@dataclass(frozen=True)
class EventRecord:
    event_id: str
    title: str
    description: Optional[str]
    profiles: tuple[str, ...]
    timezone: str
    start_date_time: datetime
    end_date_time: datetime
    created_by: Optional[str]
    update_logs: tuple[ChangeEntry, ...]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_orm(cls, event: Event) -> "EventRecord":
        return cls(
            event_id=event.event_id,
            title=event.title,
            description=event.description,
            profiles=tuple(event.profile_ids),
            timezone=event.timezone,
            start_date_time=event.start_date_time,
            end_date_time=event.end_date_time,
            created_by=event.created_by,
            update_logs=tuple(
                ChangeEntry(
                    field=log.field,
                    old_value=log.old_value,
                    new_value=log.new_value,
                    updated_at=log.updated_at,
                    updated_by=log.updated_by,
                )
                for log in event.update_logs
            ),
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


@dataclass(frozen=True)
class DateRange:
    """Inclusive bounds on the event start instant."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass(frozen=True)
class EventFilter:
    profile_id: Optional[str] = None
    date_range: Optional[DateRange] = None
    timezone: Optional[str] = None
    search_text: Optional[str] = None


class EventRepository(SqlRepository):

    def _query(self):
        return self.db.query(Event).options(
            selectinload(Event.profile_links),
            selectinload(Event.update_logs),
        )

    def _load(self, event_id: str) -> Event:
        event = self._query().filter(Event.event_id == event_id).first()
        if event is None:
            raise NotFound("Event", event_id)
        return event

    def find(self, filters: Optional[EventFilter] = None) -> list[EventRecord]:
        """Events matching every given filter, earliest start first."""
        filters = filters or EventFilter()
        with self._store("find"):
            query = self._query()
            if filters.profile_id:
                query = query.filter(Event.profile_links.any(EventProfile.profile_id == filters.profile_id))
            if filters.date_range is not None:
                if filters.date_range.start is not None:
                    query = query.filter(Event.start_date_time >= filters.date_range.start)
                if filters.date_range.end is not None:
                    query = query.filter(Event.start_date_time <= filters.date_range.end)
            if filters.timezone:
                query = query.filter(Event.timezone == filters.timezone)
            if filters.search_text and filters.search_text.strip():
                # Any token may match, in either text field.
                clauses = []
                for token in filters.search_text.split():
                    pattern = like_pattern(token)
                    clauses.append(Event.title.ilike(pattern, escape="\\"))
                    clauses.append(Event.description.ilike(pattern, escape="\\"))
                query = query.filter(or_(*clauses))
            events = query.order_by(Event.start_date_time.asc(), Event.created_at.asc()).all()
            return [EventRecord.from_orm(e) for e in events]

    def get_by_id(self, event_id: str) -> EventRecord:
        with self._store("get_by_id"):
            return EventRecord.from_orm(self._load(event_id))

    def create(self, candidate: EventCandidate, created_by: Optional[str] = None) -> EventRecord:
        candidate = candidate.normalized()
        errors = validate(candidate)
        if errors:
            raise ValidationFailed(errors)

        with self._store("create"):
            now = utcnow()
            event = Event(
                title=candidate.title,
                description=candidate.description,
                timezone=candidate.timezone,
                start_date_time=candidate.start_date_time,
                end_date_time=candidate.end_date_time,
                created_by=created_by,
                created_at=now,
                updated_at=now,
            )
            event.profile_links = [
                EventProfile(profile_id=pid, position=i) for i, pid in enumerate(candidate.profiles)
            ]
            self.db.add(event)
            self.db.commit()
            record = EventRecord.from_orm(self._load(event.event_id))
        logger.info("Created event '%s' (%s) by %s", record.title, record.event_id, created_by)
        return record

    def update(
        self,
        event_id: str,
        mutator: Mutator,
        actor_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> EventRecord:
        """Load, mutate, re-validate, diff and commit in one transaction.

        Nothing is written unless the whole resulting record is valid.
        """
        now = now or utcnow()
        with self._store("update"):
            event = self._load(event_id)
            previous = EventCandidate.from_record(EventRecord.from_orm(event))
            proposed = mutator(previous).normalized()

            errors = validate(proposed)
            if errors:
                logger.warning("Rejected update of event %s: %s", event_id, [e.field for e in errors])
                raise ValidationFailed(errors)

            entries = diff(previous, proposed, actor_id, now)
            if not entries:
                return EventRecord.from_orm(event)

            event.title = proposed.title
            event.description = proposed.description
            event.timezone = proposed.timezone
            event.start_date_time = proposed.start_date_time
            event.end_date_time = proposed.end_date_time
            if any(entry.field == "profiles" for entry in entries):
                event.profile_links = [
                    EventProfile(profile_id=pid, position=i) for i, pid in enumerate(proposed.profiles)
                ]
            offset = len(event.update_logs)
            for i, entry in enumerate(entries):
                event.update_logs.append(EventChangeLog(
                    position=offset + i,
                    field=entry.field,
                    old_value=entry.old_value,
                    new_value=entry.new_value,
                    updated_at=entry.updated_at,
                    updated_by=entry.updated_by,
                ))
            event.updated_at = now
            self.db.commit()
            record = EventRecord.from_orm(self._load(event_id))
        logger.info("Updated event %s (%s) by %s", event_id, ", ".join(e.field for e in entries), actor_id)
        return record

    def delete(self, event_id: str) -> EventRecord:
        with self._store("delete"):
            event = self._load(event_id)
            record = EventRecord.from_orm(event)
            self.db.delete(event)
            self.db.commit()
        logger.info("Deleted event %s", event_id)
        return record
