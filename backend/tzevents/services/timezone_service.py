"""Instant conversion between wall-clock strings and UTC instants.

Wall-clock input is interpreted against an IANA zone using pytz. DST edge
cases are resolved forward:

- ambiguous fall-back times map to the later instant (standard offset)
- nonexistent spring-forward times are pushed forward by the gap, so
  02:30 on a 02:00 -> 03:00 transition day becomes 03:30 local

Strings that already carry an offset (or ``Z``) are absolute and are
converted to UTC directly; the zone is still checked.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Union

import pytz

from tzevents.errors import InvalidDateTime, InvalidTimezone

logger = logging.getLogger(__name__)

COMMON_TIMEZONES = [
    "UTC",
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Toronto",
    "America/Vancouver",
    "America/Mexico_City",
    "America/Sao_Paulo",
    "America/Argentina/Buenos_Aires",
    "Europe/London",
    "Europe/Paris",
    "Europe/Berlin",
    "Europe/Rome",
    "Europe/Madrid",
    "Europe/Amsterdam",
    "Europe/Brussels",
    "Europe/Zurich",
    "Europe/Moscow",
    "Africa/Cairo",
    "Africa/Johannesburg",
    "Africa/Lagos",
    "Africa/Nairobi",
    "Asia/Dubai",
    "Asia/Kolkata",
    "Asia/Bangkok",
    "Asia/Singapore",
    "Asia/Hong_Kong",
    "Asia/Shanghai",
    "Asia/Tokyo",
    "Asia/Seoul",
    "Asia/Taipei",
    "Asia/Jakarta",
    "Asia/Manila",
    "Australia/Sydney",
    "Australia/Melbourne",
    "Australia/Brisbane",
    "Australia/Perth",
    "Pacific/Auckland",
    "Pacific/Fiji",
    "Pacific/Honolulu",
]

DateTimeInput = Union[str, datetime]


def get_zone(zone_id: Optional[str], field: str = "timezone"):
    """Return the pytz zone for an IANA identifier or raise InvalidTimezone."""
    if not isinstance(zone_id, str) or not zone_id.strip():
        raise InvalidTimezone(zone_id, field=field)
    try:
        return pytz.timezone(zone_id.strip())
    except pytz.UnknownTimeZoneError:
        raise InvalidTimezone(zone_id, field=field) from None


def is_valid_timezone(zone_id: Optional[str]) -> bool:
    try:
        get_zone(zone_id)
    except InvalidTimezone:
        return False
    return True


def ensure_timezone(zone_id: Optional[str], field: str = "timezone") -> str:
    """Validate and return the canonical (stripped) identifier."""
    return get_zone(zone_id, field=field).zone


def parse_date_time(value: DateTimeInput, field: str = "dateTime") -> datetime:
    """Parse an ISO-8601 string; the result may be naive or aware."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateTime(value, field=field)
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise InvalidDateTime(value, field=field) from None


def _localize(naive: datetime, tz) -> datetime:
    try:
        return tz.localize(naive, is_dst=None)
    except pytz.AmbiguousTimeError:
        logger.debug("Ambiguous wall-clock %s in %s, taking the later instant", naive, tz.zone)
        return tz.localize(naive, is_dst=False)
    except pytz.NonExistentTimeError:
        shifted = tz.normalize(tz.localize(naive, is_dst=False))
        logger.debug("Nonexistent wall-clock %s in %s, moved to %s", naive, tz.zone, shifted)
        return shifted


def to_instant(local_date_time: DateTimeInput, zone_id: str, field: str = "dateTime") -> datetime:
    """Interpret a wall-clock value in ``zone_id`` and return an aware UTC datetime."""
    tz = get_zone(zone_id)
    parsed = parse_date_time(local_date_time, field=field)
    if parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc)
    return _localize(parsed, tz).astimezone(timezone.utc)


def to_local(instant: datetime, zone_id: str) -> str:
    """Render an instant as a wall-clock string in ``zone_id``."""
    tz = get_zone(zone_id)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    local = instant.astimezone(tz).replace(tzinfo=None)
    if local.second == 0 and local.microsecond == 0:
        return local.isoformat(timespec="minutes")
    return local.isoformat()


def offset_of(zone_id: str, at: Optional[datetime] = None) -> str:
    """Signed UTC offset of the zone at an instant, e.g. ``+05:30``."""
    tz = get_zone(zone_id)
    at = at or datetime.now(timezone.utc)
    if at.tzinfo is None:
        at = at.replace(tzinfo=timezone.utc)
    total = int(at.astimezone(tz).utcoffset().total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def list_timezones(at: Optional[datetime] = None, common_only: bool = True) -> list[dict[str, str]]:
    """Zones with their offset at ``at`` (default now), for zone pickers."""
    at = at or datetime.now(timezone.utc)
    zones = COMMON_TIMEZONES if common_only else pytz.common_timezones
    return [{"timezone": z, "offset": offset_of(z, at)} for z in zones]
