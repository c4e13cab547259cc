"""Shared session handling for SQL-backed repositories."""
import logging
import time
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import exc as sa_exc, text
from sqlalchemy.orm import Session

from tzevents.errors import FieldError, StoreUnavailable, Timeout, TzEventsError, ValidationFailed

logger = logging.getLogger(__name__)

_TIMEOUT_MARKERS = ("timeout", "timed out", "database is locked", "canceling statement")


class SqlRepository:
    """Wraps one session; every store round trip goes through ``_store``.

    ``deadline`` is a ``time.monotonic()`` value supplied by the caller.
    Once it has passed, no further store operation is started, and the
    remaining budget caps how long the store itself may block
    (``statement_timeout`` on PostgreSQL, ``busy_timeout`` on SQLite).
    """

    def __init__(self, db: Session, deadline: Optional[float] = None):
        self.db = db
        self.deadline = deadline

    def _check_deadline(self, operation: str) -> None:
        if self.deadline is not None and time.monotonic() > self.deadline:
            logger.warning("Deadline passed before %s", operation)
            raise Timeout(f"Deadline exceeded before {operation}")

    def _apply_deadline(self) -> None:
        if self.deadline is None:
            return
        remaining_ms = max(1, int((self.deadline - time.monotonic()) * 1000))
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            # Scoped to the current transaction.
            self.db.execute(text(f"SET LOCAL statement_timeout = {remaining_ms}"))
        elif dialect == "sqlite":
            self.db.execute(text(f"PRAGMA busy_timeout = {remaining_ms}"))

    @contextmanager
    def _store(self, operation: str):
        """Translate driver failures into domain errors and roll back on any failure."""
        self._check_deadline(operation)
        try:
            self._apply_deadline()
            yield
        except TzEventsError:
            self.db.rollback()
            raise
        except sa_exc.TimeoutError as exc:
            self.db.rollback()
            logger.warning("Connection pool timeout during %s: %s", operation, exc)
            raise Timeout(f"Timed out waiting for a connection during {operation}") from exc
        except sa_exc.IntegrityError as exc:
            self.db.rollback()
            logger.warning("Integrity violation during %s: %s", operation, exc.orig)
            raise ValidationFailed([_integrity_field_error(exc)]) from exc
        except sa_exc.OperationalError as exc:
            self.db.rollback()
            if any(marker in str(exc.orig).lower() for marker in _TIMEOUT_MARKERS):
                logger.warning("Store timeout during %s: %s", operation, exc.orig)
                raise Timeout(f"Store timed out during {operation}") from exc
            logger.warning("Store unavailable during %s: %s", operation, exc.orig)
            raise StoreUnavailable(f"Database unavailable during {operation}") from exc
        except sa_exc.DBAPIError as exc:
            self.db.rollback()
            logger.warning("Driver error during %s: %s", operation, exc.orig)
            raise StoreUnavailable(f"Database error during {operation}") from exc
        except Exception:
            self.db.rollback()
            raise


def _integrity_field_error(exc: sa_exc.IntegrityError) -> FieldError:
    message = str(exc.orig)
    if "end_after_start" in message:
        return FieldError("endDateTime", "End date/time must be after start date/time")
    if "foreign key" in message.lower():
        return FieldError("profiles", "Referenced profile does not exist")
    return FieldError("event", "Record violates a store constraint")


def like_pattern(token: str) -> str:
    """Substring LIKE pattern with ``%``, ``_`` and ``\\`` matched literally (escape ``\\``)."""
    escaped = token.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
