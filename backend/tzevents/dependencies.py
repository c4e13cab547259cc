"""Request-scoped dependencies shared by routers."""
import time
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from tzevents.config import settings
from tzevents.database import get_db
from tzevents.repositories.profile_repository import ProfileRepository
from tzevents.services.event_service import EventService


def request_deadline() -> Optional[float]:
    """Monotonic deadline for the store work of one request."""
    if settings.STORE_TIMEOUT_SECONDS is None:
        return None
    return time.monotonic() + settings.STORE_TIMEOUT_SECONDS


def get_event_service(
    db: Session = Depends(get_db),
    deadline: Optional[float] = Depends(request_deadline),
) -> EventService:
    return EventService(db, deadline=deadline)


def get_profile_repository(
    db: Session = Depends(get_db),
    deadline: Optional[float] = Depends(request_deadline),
) -> ProfileRepository:
    return ProfileRepository(db, deadline=deadline)
