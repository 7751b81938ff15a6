"""Song catalog — an artist's repertoire that audience requests point at."""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from tocafy.errors import AuthorizationError, NotFoundError, ValidationError
from tocafy.models.song import Song
from tocafy.services.locking import commit
from tocafy.services.profile_service import require_artist

logger = logging.getLogger(__name__)


def create_song(db: Session, owner_id: str, title: str, artist: str, **details: Any) -> Song:
    title = (title or "").strip()
    artist = (artist or "").strip()
    if not title or not artist:
        raise ValidationError("Song title and artist are required")
    require_artist(db, owner_id)

    song = Song(owner_id=owner_id, title=title, artist=artist, **details)
    db.add(song)
    commit(db)
    db.refresh(song)
    logger.info("Added song '%s' by %s (%s) to catalog of %s", title, artist, song.song_id, owner_id)
    return song


def get_song(db: Session, song_id: str) -> Song:
    song = db.query(Song).filter(Song.song_id == song_id).first()
    if not song:
        raise NotFoundError("Song not found")
    return song


def list_songs(db: Session, owner_id: str, available_only: bool = False) -> list[Song]:
    query = db.query(Song).filter(Song.owner_id == owner_id)
    if available_only:
        query = query.filter(Song.is_available.is_(True))
    return query.order_by(Song.title).all()


def update_song(db: Session, song_id: str, actor_id: str, updates: dict[str, Any]) -> Song:
    """Owner-only partial update; ``updates`` comes from the typed SongUpdate schema."""
    song = get_song(db, song_id)
    if song.owner_id != actor_id:
        raise AuthorizationError("Only the song's artist may edit it")
    for field in ("title", "artist"):
        if field in updates:
            updates[field] = (updates[field] or "").strip()
            if not updates[field]:
                raise ValidationError(f"Song {field} cannot be empty")
    for field, value in updates.items():
        setattr(song, field, value)
    commit(db)
    db.refresh(song)
    logger.info("Updated song %s (%s)", song_id, ", ".join(sorted(updates)))
    return song


def require_requestable(db: Session, song_id: str, artist_id: str) -> Song:
    """A request may only point at an available song from the show's artist."""
    song: Optional[Song] = db.query(Song).filter(Song.song_id == song_id).first()
    if not song or song.owner_id != artist_id:
        raise ValidationError("Song is not in this artist's catalog")
    if not song.is_available:
        raise ValidationError("Song is not available for requests")
    return song
