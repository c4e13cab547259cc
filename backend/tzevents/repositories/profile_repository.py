"""Profile persistence and the reference resolver used by the event core."""
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from tzevents.errors import FieldError, NotFound, ValidationFailed
from tzevents.models.profile import Profile
from tzevents.repositories.base import SqlRepository, like_pattern
from tzevents.services.event_validator import validate_profile
from tzevents.services.timezone_service import ensure_timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileRef:
    """Read-time view of a referenced profile."""

    id: str
    name: str
    timezone: str

    def summary(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name}

    def detail(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "timezone": self.timezone}


class ProfileRepository(SqlRepository):

    def find(
        self,
        timezone: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "createdAt",
    ) -> list[Profile]:
        """Active profiles; ``sort_by=name`` is ascending, anything else newest first."""
        with self._store("list_profiles"):
            query = self.db.query(Profile).filter(Profile.is_active.is_(True))
            if timezone:
                query = query.filter(Profile.timezone == timezone)
            if search:
                query = query.filter(Profile.name.ilike(like_pattern(search), escape="\\"))
            if sort_by == "name":
                query = query.order_by(Profile.name.asc())
            else:
                query = query.order_by(Profile.created_at.desc())
            return query.all()

    def get_by_id(self, profile_id: str) -> Profile:
        with self._store("get_profile"):
            profile = self.db.get(Profile, profile_id)
        if profile is None:
            raise NotFound("Profile", profile_id)
        return profile

    def create(self, name: Optional[str], timezone: Optional[str] = "UTC", is_active: bool = True) -> Profile:
        errors = validate_profile(name, timezone)
        if errors:
            raise ValidationFailed(errors)
        with self._store("create_profile"):
            profile = Profile(name=name.strip(), timezone=ensure_timezone(timezone), is_active=is_active)
            self.db.add(profile)
            self.db.commit()
            self.db.refresh(profile)
        logger.info("Created profile %s (%s)", profile.profile_id, profile.name)
        return profile

    def update(self, profile_id: str, changes: Mapping[str, Any]) -> Profile:
        """Partial update; the merged profile must still be valid."""
        with self._store("update_profile"):
            profile = self.db.get(Profile, profile_id)
            if profile is None:
                raise NotFound("Profile", profile_id)
            name = changes.get("name", profile.name)
            timezone = changes.get("timezone", profile.timezone)
            errors = validate_profile(name, timezone)
            if "is_active" in changes and changes["is_active"] is None:
                errors.append(FieldError("isActive", "isActive must be true or false"))
            if errors:
                raise ValidationFailed(errors)
            profile.name = name.strip()
            profile.timezone = ensure_timezone(timezone)
            if "is_active" in changes:
                profile.is_active = changes["is_active"]
            self.db.commit()
            self.db.refresh(profile)
        logger.info("Updated profile %s", profile_id)
        return profile

    def resolve_many(self, profile_ids: Iterable[Optional[str]]) -> dict[str, ProfileRef]:
        """Map of id -> ProfileRef for the ids that exist; unknown ids are absent."""
        ids = {pid for pid in profile_ids if pid}
        if not ids:
            return {}
        with self._store("resolve_profiles"):
            rows = self.db.query(Profile).filter(Profile.profile_id.in_(ids)).all()
        return {p.profile_id: ProfileRef(p.profile_id, p.name, p.timezone) for p in rows}

    def resolve_profile(self, profile_id: str) -> ProfileRef:
        ref = self.resolve_many([profile_id]).get(profile_id)
        if ref is None:
            raise NotFound("Profile", profile_id)
        return ref

    def missing(self, profile_ids: Iterable[Optional[str]]) -> list[str]:
        """Ids from ``profile_ids`` with no matching profile, in input order."""
        ids = [pid for pid in profile_ids if pid]
        known = self.resolve_many(ids)
        seen: set[str] = set()
        result = []
        for pid in ids:
            if pid not in known and pid not in seen:
                seen.add(pid)
                result.append(pid)
        return result
