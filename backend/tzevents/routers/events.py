"""Event API routes: delegates to EventService for invariant enforcement."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from tzevents.dependencies import get_event_service
from tzevents.errors import FieldError, InvalidDateTime, ValidationFailed
from tzevents.repositories.event_repository import DateRange, EventFilter
from tzevents.schemas.error import error_responses
from tzevents.schemas.event import EventCreate, EventUpdate, EventOut, EventDeleteOut
from tzevents.services.event_service import EventService
from tzevents.services.timezone_service import ensure_timezone, to_instant

logger = logging.getLogger(__name__)
router = APIRouter(responses=error_responses(503, 504))


def _range_bound(value: Optional[str], field: str, zone: str):
    if not value:
        return None
    return to_instant(value, zone, field=field)


def _date_range(start_date: Optional[str], end_date: Optional[str], zone: str) -> Optional[DateRange]:
    """Naive bounds are read in ``zone``; bad bounds are reported together."""
    if not start_date and not end_date:
        return None
    bounds, errors = {}, []
    for key, value, field in (("start", start_date, "startDate"), ("end", end_date, "endDate")):
        try:
            bounds[key] = _range_bound(value, field, zone)
        except InvalidDateTime as exc:
            errors.extend(exc.errors)
    if errors:
        raise ValidationFailed(errors)
    if bounds["start"] and bounds["end"] and bounds["end"] < bounds["start"]:
        raise ValidationFailed([FieldError("endDate", "endDate must not be before startDate")])
    return DateRange(start=bounds["start"], end=bounds["end"])


@router.get("/", response_model=list[EventOut], responses=error_responses(400))
def list_events(
    profile_id: Optional[str] = Query(None, alias="profileId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    timezone: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    display_timezone: Optional[str] = Query(None, alias="displayTimezone"),
    service: EventService = Depends(get_event_service),
):
    """List events with optional filters, earliest start first."""
    if display_timezone:
        display_timezone = ensure_timezone(display_timezone, field="displayTimezone")
    filters = EventFilter(
        profile_id=profile_id,
        date_range=_date_range(start_date, end_date, display_timezone or "UTC"),
        timezone=timezone,
        search_text=search,
    )
    return service.list_events(filters, display_timezone=display_timezone)


@router.get("/{event_id}", response_model=EventOut, responses=error_responses(400, 404))
def get_event(
    event_id: str,
    display_timezone: Optional[str] = Query(None, alias="displayTimezone"),
    service: EventService = Depends(get_event_service),
):
    """Fetch a single event with profiles and change-log actors resolved."""
    return service.get_event(event_id, display_timezone=display_timezone)


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED, responses=error_responses(400))
def create_event(payload: EventCreate, service: EventService = Depends(get_event_service)):
    """Create a new event from wall-clock times in the event timezone."""
    return service.create_event(payload.model_dump(exclude_unset=True))


@router.put("/{event_id}", response_model=EventOut, responses=error_responses(400, 404))
def update_event(event_id: str, payload: EventUpdate, service: EventService = Depends(get_event_service)):
    """Update any subset of fields; the change log grows by one entry per changed field."""
    changes = payload.model_dump(exclude_unset=True)
    updated_by = changes.pop("updated_by", None)
    return service.update_event(event_id, changes, updated_by=updated_by)


@router.delete("/{event_id}", response_model=EventDeleteOut, responses=error_responses(404))
def delete_event(event_id: str, service: EventService = Depends(get_event_service)):
    """Delete an event and return the removed record."""
    event = service.delete_event(event_id)
    return {"message": "Event deleted successfully", "event": event}
