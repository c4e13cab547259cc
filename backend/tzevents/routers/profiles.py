"""Profile API routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from tzevents.dependencies import get_profile_repository
from tzevents.repositories.profile_repository import ProfileRepository
from tzevents.schemas.error import error_responses
from tzevents.schemas.profile import ProfileCreate, ProfileUpdate, ProfileOut

logger = logging.getLogger(__name__)
router = APIRouter(responses=error_responses(503, 504))


@router.post("/", response_model=ProfileOut, status_code=status.HTTP_201_CREATED, responses=error_responses(400))
def create_profile(payload: ProfileCreate, profiles: ProfileRepository = Depends(get_profile_repository)):
    """Create a new profile with its home timezone."""
    return profiles.create(payload.name, payload.timezone, is_active=payload.is_active)


@router.get("/", response_model=list[ProfileOut])
def list_profiles(
    timezone: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: str = Query("createdAt", alias="sortBy"),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    """List active profiles."""
    return profiles.find(timezone=timezone, search=search, sort_by=sort_by)


@router.get("/{profile_id}", response_model=ProfileOut, responses=error_responses(404))
def get_profile(profile_id: str, profiles: ProfileRepository = Depends(get_profile_repository)):
    """Fetch a single profile by ID."""
    return profiles.get_by_id(profile_id)


@router.put("/{profile_id}", response_model=ProfileOut, responses=error_responses(400, 404))
def update_profile(
    profile_id: str,
    payload: ProfileUpdate,
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    """Update a profile (partial update, mainly for timezone changes)."""
    return profiles.update(profile_id, payload.model_dump(exclude_unset=True))
