"""Show API routes — delegates to show_service for state machine enforcement."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tocafy.database import get_db
from tocafy.errors import ValidationError
from tocafy.models.show import Show, ShowStatus
from tocafy.schemas.show import ActivityOut, ShowCreate, ShowOut, ShowStatusOut, ShowTransition
from tocafy.schemas.song_request import SongRequestOut
from tocafy.services import notifier, queue_service, show_service
from tocafy.services.locking import call_with_retry

logger = logging.getLogger(__name__)
router = APIRouter()


def show_out(show: Show) -> ShowOut:
    out = ShowOut.model_validate(show)
    out.share_url = show_service.share_url(show)
    out.stage_url = show_service.stage_url(show)
    return out


def parse_show_status(value: str) -> ShowStatus:
    try:
        return ShowStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid show status: {value}")


@router.post("/", response_model=ShowOut, status_code=status.HTTP_201_CREATED)
def create_show(payload: ShowCreate, db: Session = Depends(get_db)):
    """Create a draft show for an artist."""
    show = show_service.create_show(
        db,
        owner_id=payload.owner_id,
        name=payload.name,
        description=payload.description,
        location=payload.location,
    )
    return show_out(show)


@router.get("/", response_model=list[ShowOut])
def list_shows(
    owner_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List shows, optionally filtered by artist or status."""
    show_status = parse_show_status(status_filter) if status_filter else None
    return [show_out(s) for s in show_service.list_shows(db, owner_id, show_status)]


@router.get("/{show_id}", response_model=ShowOut)
def get_show(show_id: str, db: Session = Depends(get_db)):
    return show_out(show_service.get_show(db, show_id))


@router.get("/{show_id}/status", response_model=ShowStatusOut)
def get_status(show_id: str, db: Session = Depends(get_db)):
    return ShowStatusOut(show_id=show_id, status=show_service.get_status(db, show_id).value)


@router.post("/{show_id}/transition", response_model=ShowOut)
def transition_show(show_id: str, payload: ShowTransition, db: Session = Depends(get_db)):
    """Move a show through draft → live ↔ paused → ended (owner only)."""
    target = parse_show_status(payload.target_status)
    show = call_with_retry(show_service.transition, db, show_id, target, payload.actor_id)
    return show_out(show)


@router.post("/{show_id}/code", response_model=ShowOut)
def assign_code(
    show_id: str,
    actor_id: str = Query(..., description="ID of the artist requesting the share code"),
    db: Session = Depends(get_db),
):
    """Assign the public share code if the show has none yet."""
    return show_out(call_with_retry(show_service.assign_code, db, show_id, actor_id))


@router.get("/{show_id}/queue", response_model=list[SongRequestOut])
def get_queue(show_id: str, db: Session = Depends(get_db)):
    """Artist view of the active queue, flagged requests included."""
    show_service.get_show(db, show_id)
    return queue_service.list_queue(db, show_id, include_flagged=True)


@router.post("/{show_id}/queue/recompute", response_model=list[SongRequestOut])
def recompute_queue(show_id: str, db: Session = Depends(get_db)):
    return call_with_retry(queue_service.recompute_positions, db, show_id)


@router.get("/{show_id}/activity", response_model=list[ActivityOut])
def list_activity(
    show_id: str,
    after: Optional[int] = Query(None, description="Return entries after this activity_id"),
    db: Session = Depends(get_db),
):
    """Change feed for incremental dashboard updates."""
    show_service.get_show(db, show_id)
    return notifier.list_activity(db, show_id, after=after)
