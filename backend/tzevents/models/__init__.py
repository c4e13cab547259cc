"""ORM models; importing this package registers every table on Base.metadata."""
from tzevents.models.profile import Profile  # noqa: F401
from tzevents.models.event import Event, EventProfile  # noqa: F401
from tzevents.models.event_change_log import EventChangeLog  # noqa: F401
