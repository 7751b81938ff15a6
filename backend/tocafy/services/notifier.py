"""Change notification — ledger rows plus an in-process fan-out broker.

Every show/request mutation is written to ``show_activity`` inside the same
transaction, then published to subscribers once the transaction commits.
Fan-out is best effort: a failing subscriber is logged and dropped for that
delivery, never retried. At-least-once delivery to remote clients belongs to
whatever realtime layer subscribes here.
"""
import logging
from dataclasses import dataclass, asdict
from threading import Lock
from typing import Callable, Optional

from sqlalchemy.orm import Session

from tocafy.models.show_activity import ShowActivity, ActivityEntity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    entity: str
    id: str
    show_id: str
    new_state: str

    def to_dict(self) -> dict:
        return asdict(self)


Subscriber = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """Per-show subscriber registry."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Subscriber]] = {}
        self._lock = Lock()

    def subscribe(self, show_id: str, callback: Subscriber) -> None:
        with self._lock:
            self._listeners.setdefault(show_id, []).append(callback)

    def unsubscribe(self, show_id: str, callback: Subscriber) -> None:
        with self._lock:
            listeners = self._listeners.get(show_id)
            if not listeners:
                return
            if callback in listeners:
                listeners.remove(callback)
            if not listeners:
                self._listeners.pop(show_id, None)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            listeners = list(self._listeners.get(event.show_id, ()))
        for callback in listeners:
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "change notification dropped for show %s (%s %s)",
                    event.show_id, event.entity, event.id,
                )


notifier = ChangeNotifier()


def record_change(
    db: Session,
    entity: ActivityEntity,
    entity_id: str,
    show_id: str,
    new_state: str,
    actor_id: Optional[str] = None,
) -> ChangeEvent:
    """Append a ledger row (uncommitted) and return the event to publish after commit."""
    db.add(ShowActivity(
        show_id=show_id,
        entity=entity,
        entity_id=entity_id,
        new_state=new_state,
        actor_id=actor_id,
    ))
    return ChangeEvent(entity=entity.value, id=entity_id, show_id=show_id, new_state=new_state)


def list_activity(db: Session, show_id: str, after: Optional[int] = None, limit: int = 200) -> list[ShowActivity]:
    """Ledger rows for a show, oldest first, strictly after the given cursor."""
    query = db.query(ShowActivity).filter(ShowActivity.show_id == show_id)
    if after is not None:
        query = query.filter(ShowActivity.activity_id > after)
    return query.order_by(ShowActivity.activity_id).limit(limit).all()
