"""Song catalog API routes."""
import logging
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tocafy.database import get_db
from tocafy.schemas.song import SongCreate, SongOut, SongUpdate
from tocafy.services import song_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=SongOut, status_code=status.HTTP_201_CREATED)
def create_song(payload: SongCreate, db: Session = Depends(get_db)):
    """Add a song to an artist's catalog (manual entry or catalog-search import)."""
    details = payload.model_dump(exclude={"owner_id", "title", "artist"})
    return song_service.create_song(db, payload.owner_id, payload.title, payload.artist, **details)


@router.get("/", response_model=list[SongOut])
def list_songs(
    owner_id: str = Query(...),
    available_only: bool = Query(False),
    db: Session = Depends(get_db),
):
    return song_service.list_songs(db, owner_id, available_only)


@router.get("/{song_id}", response_model=SongOut)
def get_song(song_id: str, db: Session = Depends(get_db)):
    return song_service.get_song(db, song_id)


@router.patch("/{song_id}", response_model=SongOut)
def update_song(
    song_id: str,
    payload: SongUpdate,
    actor_id: str = Query(..., description="ID of the artist editing the song"),
    db: Session = Depends(get_db),
):
    """Partial update, including toggling availability for requests."""
    return song_service.update_song(db, song_id, actor_id, payload.model_dump(exclude_unset=True))
