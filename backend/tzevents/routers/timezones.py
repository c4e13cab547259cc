"""Timezone listing for zone pickers."""
from fastapi import APIRouter, Query

from tzevents.schemas.profile import TimezoneOut
from tzevents.services.timezone_service import list_timezones

router = APIRouter()


@router.get("/", response_model=list[TimezoneOut])
def get_timezones(all_zones: bool = Query(False, alias="all")):
    """Timezones with their current UTC offset; common zones unless ``all=true``."""
    return list_timezones(common_only=not all_zones)
