"""Song request API routes — artist-side queue management."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tocafy.database import get_db
from tocafy.errors import ValidationError
from tocafy.models.song_request import RequestStatus
from tocafy.schemas.song_request import SongRequestCreate, SongRequestOut
from tocafy.services import queue_service
from tocafy.services.locking import call_with_retry

logger = logging.getLogger(__name__)
router = APIRouter()

ACTOR = Query(..., description="ID of the artist performing the action")


@router.get("/", response_model=list[SongRequestOut])
def list_requests(
    show_id: str = Query(...),
    status_filter: Optional[str] = Query(None),
    flagged: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    """All requests of a show in submission order (dashboard, moderation panel)."""
    request_status = None
    if status_filter:
        try:
            request_status = RequestStatus(status_filter)
        except ValueError:
            raise ValidationError(f"Invalid request status: {status_filter}")
    return queue_service.list_requests(db, show_id, request_status, flagged)


@router.post("/", response_model=SongRequestOut, status_code=201)
def submit_request(payload: SongRequestCreate, show_id: str = Query(...), db: Session = Depends(get_db)):
    """Submit a request straight to a show id (the audience routes resolve codes first)."""
    return call_with_retry(queue_service.submit, db, show_id, **payload.model_dump())


@router.get("/now-playing", response_model=Optional[SongRequestOut])
def now_playing(show_id: str = Query(...), db: Session = Depends(get_db)):
    return queue_service.now_playing(db, show_id)


@router.get("/{request_id}", response_model=SongRequestOut)
def get_request(request_id: str, db: Session = Depends(get_db)):
    return queue_service.get_request(db, request_id)


@router.post("/{request_id}/accept", response_model=SongRequestOut)
def accept_request(request_id: str, actor_id: str = ACTOR, db: Session = Depends(get_db)):
    """pending → accepted; also approves a flagged request."""
    return call_with_retry(queue_service.accept, db, request_id, actor_id)


@router.post("/{request_id}/play", response_model=SongRequestOut)
def play_request(request_id: str, actor_id: str = ACTOR, db: Session = Depends(get_db)):
    """accepted → playing; the previously playing request is marked played."""
    return call_with_retry(queue_service.play, db, request_id, actor_id)


@router.post("/{request_id}/complete", response_model=SongRequestOut)
def complete_request(request_id: str, actor_id: str = ACTOR, db: Session = Depends(get_db)):
    return call_with_retry(queue_service.complete, db, request_id, actor_id)


@router.post("/{request_id}/skip", response_model=SongRequestOut)
def skip_request(request_id: str, actor_id: str = ACTOR, db: Session = Depends(get_db)):
    """pending/accepted → skipped; also how a flagged request is rejected."""
    return call_with_retry(queue_service.skip, db, request_id, actor_id)
