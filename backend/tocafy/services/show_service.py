"""Show registry — enforces the show status state machine.

Responsibilities:
- Only the owning artist may transition a show or assign its code
- draft → live → {paused ↔ live} → ended; ended is terminal, same-state moves rejected
- started_at is set on the first move to live, ended_at on the move to ended
- The public code is assigned once (first go-live or explicit request) and never changes
- Every transition is logged to the activity ledger and published after commit
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from tocafy.config import settings
from tocafy.errors import AuthorizationError, InvalidTransitionError, NotFoundError, ValidationError
from tocafy.models.show import Show, ShowStatus, SHOW_TRANSITIONS
from tocafy.models.show_activity import ActivityEntity
from tocafy.services import code_resolver
from tocafy.services.locking import commit, show_transaction
from tocafy.services.profile_service import get_profile, require_artist

logger = logging.getLogger(__name__)


def _check_owner(show: Show, actor_id: str) -> None:
    if show.owner_id != actor_id:
        raise AuthorizationError("Only the show's artist may modify this show")


def share_url(show: Show) -> str:
    return f"{settings.PUBLIC_ORIGIN.rstrip('/')}/audience/{show.public_code or show.show_id}"


def stage_url(show: Show) -> str:
    return f"{settings.PUBLIC_ORIGIN.rstrip('/')}/show/{show.show_id}"


def create_show(
    db: Session,
    owner_id: str,
    name: str,
    description: Optional[str] = None,
    location: Optional[str] = None,
) -> Show:
    """Create a draft show without a code."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Show name is required")
    require_artist(db, owner_id)

    show = Show(
        owner_id=owner_id,
        name=name,
        description=description,
        location=location,
        status=ShowStatus.draft,
        version=1,
    )
    db.add(show)
    commit(db)
    db.refresh(show)
    logger.info("Created show '%s' (%s) for artist %s", name, show.show_id, owner_id)
    return show


def get_show(db: Session, show_id: str) -> Show:
    show = db.query(Show).filter(Show.show_id == show_id).first()
    if not show:
        raise NotFoundError("Show not found")
    return show


def get_status(db: Session, show_id: str) -> ShowStatus:
    return get_show(db, show_id).status


def list_shows(db: Session, owner_id: Optional[str] = None, status: Optional[ShowStatus] = None) -> list[Show]:
    query = db.query(Show)
    if owner_id:
        query = query.filter(Show.owner_id == owner_id)
    if status:
        query = query.filter(Show.status == status)
    return query.order_by(Show.created_at.desc()).all()


def _assign_code(db: Session, show: Show) -> bool:
    if show.public_code:
        return False
    owner = get_profile(db, show.owner_id)
    show.public_code = code_resolver.generate_code(db, owner.username, show.name)
    logger.info("Assigned code '%s' to show %s", show.public_code, show.show_id)
    return True


def transition(db: Session, show_id: str, target: ShowStatus, actor_id: str) -> Show:
    """Move a show to ``target`` if the state machine allows it."""
    with show_transaction(db, show_id) as scope:
        show = scope.show
        _check_owner(show, actor_id)

        current = show.status
        if target not in SHOW_TRANSITIONS[current]:
            raise InvalidTransitionError(f"Cannot move show from {current.value} to {target.value}")

        now = datetime.now(timezone.utc)
        show.status = target
        if target == ShowStatus.live:
            if show.started_at is None:
                show.started_at = now
            _assign_code(db, show)
        elif target == ShowStatus.ended:
            show.ended_at = now

        scope.emit(ActivityEntity.show, show.show_id, target.value, actor_id)

    db.refresh(show)
    logger.info("Show %s moved %s -> %s by %s", show_id, current.value, target.value, actor_id)
    return show


def assign_code(db: Session, show_id: str, actor_id: str) -> Show:
    """Give the show its public code if it has none; an existing code is kept as is."""
    with show_transaction(db, show_id) as scope:
        show = scope.show
        _check_owner(show, actor_id)
        _assign_code(db, show)

    db.refresh(show)
    return show
