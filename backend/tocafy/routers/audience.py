"""Audience API routes — join a live show by code and send requests.

``code`` may be a show code, '@code', or a raw show id from an older link.
"""
import logging
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from tocafy.database import get_db
from tocafy.schemas.song import PublicSongOut
from tocafy.schemas.song_request import PublicQueueItemOut, SongRequestCreate, SongRequestOut
from tocafy.services import code_resolver, queue_service, song_service
from tocafy.services.locking import call_with_retry

logger = logging.getLogger(__name__)
router = APIRouter()


class JoinedShowOut(BaseModel):
    show_id: str
    name: str
    status: str
    public_code: str | None = None
    artist_name: str


@router.get("/{code}", response_model=JoinedShowOut)
def join_show(code: str, db: Session = Depends(get_db)):
    """Resolve a code to a live show."""
    show = code_resolver.resolve(db, code, audience=True)
    return JoinedShowOut(
        show_id=show.show_id,
        name=show.name,
        status=show.status.value,
        public_code=show.public_code,
        artist_name=show.owner.display_name or show.owner.username,
    )


@router.get("/{code}/songs", response_model=list[PublicSongOut])
def list_available_songs(code: str, db: Session = Depends(get_db)):
    show = code_resolver.resolve(db, code, audience=True)
    return song_service.list_songs(db, show.owner_id, available_only=True)


@router.get("/{code}/queue", response_model=list[PublicQueueItemOut])
def public_queue(code: str, db: Session = Depends(get_db)):
    """Active queue as the audience sees it: flagged requests stay hidden."""
    show = code_resolver.resolve(db, code, audience=True)
    return queue_service.list_queue(db, show.show_id, include_flagged=False)


@router.post("/{code}/requests", response_model=SongRequestOut, status_code=status.HTTP_201_CREATED)
def submit_request(code: str, payload: SongRequestCreate, db: Session = Depends(get_db)):
    show = code_resolver.resolve(db, code, audience=True)
    return call_with_retry(queue_service.submit, db, show.show_id, **payload.model_dump())
