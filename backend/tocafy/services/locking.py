"""Per-show exclusion scope for every show and queue mutation.

Within one show, status changes, position assignment and the single
``playing`` slot are only mutated while holding that show's lock:

1. an in-process lock per show id, acquired with a bounded wait;
2. the show row re-read ``FOR UPDATE`` (a no-op on SQLite);
3. a compare-and-set bump of ``shows.version`` before commit, which catches
   writers in other processes that got past (1).

Change events collected in the scope are published after the commit, still
under the lock, so subscribers see them in commit order.
"""
import logging
from contextlib import contextmanager
from threading import Lock
from typing import Iterator, Optional
from weakref import WeakValueDictionary

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from tocafy.config import settings
from tocafy.errors import ConflictError, NotFoundError, PersistenceTimeoutError, ValidationError
from tocafy.models.show import Show
from tocafy.models.show_activity import ActivityEntity
from tocafy.services.notifier import ChangeEvent, notifier, record_change

logger = logging.getLogger(__name__)

_TIMEOUT_MARKERS = ("timeout", "timed out", "database is locked", "lock wait", "canceling statement")


class ShowLocks:
    """Lazily created lock per show id.

    Entries live only while some caller holds the lock object, so the registry
    does not grow with every show ever touched.
    """

    def __init__(self) -> None:
        self._locks: "WeakValueDictionary[str, Lock]" = WeakValueDictionary()
        self._guard = Lock()

    def get(self, show_id: str) -> Lock:
        with self._guard:
            lock = self._locks.get(show_id)
            if lock is None:
                lock = self._locks[show_id] = Lock()
            return lock


show_locks = ShowLocks()


class ShowScope:
    """Handle given to the body of ``show_transaction``."""

    def __init__(self, db: Session, show: Show):
        self.db = db
        self.show = show
        self.events: list[ChangeEvent] = []

    def emit(self, entity: ActivityEntity, entity_id: str, new_state: str, actor_id: Optional[str] = None) -> None:
        self.events.append(
            record_change(self.db, entity, entity_id, self.show.show_id, new_state, actor_id)
        )


def is_timeout(exc: OperationalError) -> bool:
    text = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in text for marker in _TIMEOUT_MARKERS)


@contextmanager
def show_transaction(db: Session, show_id: str, timeout: Optional[float] = None) -> Iterator[ShowScope]:
    """Run the body as one atomic unit serialized against other writers of ``show_id``."""
    wait = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    lock = show_locks.get(show_id)
    if not lock.acquire(timeout=wait):
        raise PersistenceTimeoutError(f"Timed out after {wait}s waiting for show {show_id}")
    try:
        try:
            show = (
                db.query(Show)
                .filter(Show.show_id == show_id)
                .populate_existing()
                .with_for_update()
                .first()
            )
            if not show:
                raise NotFoundError("Show not found")
            expected_version = show.version
            scope = ShowScope(db, show)

            yield scope

            db.flush()
            bumped = (
                db.query(Show)
                .filter(Show.show_id == show_id, Show.version == expected_version)
                .update({Show.version: expected_version + 1}, synchronize_session=False)
            )
            if bumped != 1:
                raise ConflictError(f"Show {show_id} was modified concurrently. Re-fetch and retry.")
            db.commit()
        except OperationalError as exc:
            db.rollback()
            if is_timeout(exc):
                raise PersistenceTimeoutError(f"Database call timed out for show {show_id}") from exc
            raise
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError(f"Concurrent write rejected for show {show_id}. Retry.") from exc
        except Exception:
            db.rollback()
            raise

        for event in scope.events:
            notifier.publish(event)
    finally:
        lock.release()


def commit(db: Session) -> None:
    """Commit a write that is not scoped to a show.

    Timeouts map as in ``show_transaction``; a constraint violation (missing
    required value, duplicate key) rolls back and surfaces as ``ValidationError``.
    """
    try:
        db.commit()
    except OperationalError as exc:
        db.rollback()
        if is_timeout(exc):
            raise PersistenceTimeoutError("Database call timed out") from exc
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Write rejected by a database constraint: %s", exc.orig)
        raise ValidationError("Write rejected by a database constraint") from exc


def call_with_retry(func, *args, **kwargs):
    """Run a service call, retrying exactly once on a retryable error."""
    try:
        return func(*args, **kwargs)
    except (ConflictError, PersistenceTimeoutError) as exc:
        logger.warning("Retrying %s once after %s: %s", func.__name__, exc.code, exc.message)
        return func(*args, **kwargs)
