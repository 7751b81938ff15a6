"""SongRequest ORM model and its status state machine."""
import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Boolean, DateTime, Integer, Numeric, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from tocafy.database import Base


class RequestStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    playing = "playing"
    played = "played"
    skipped = "skipped"


ACTIVE_STATUSES = (RequestStatus.pending, RequestStatus.accepted)

REQUEST_TRANSITIONS = {
    RequestStatus.pending: {RequestStatus.accepted, RequestStatus.skipped},
    RequestStatus.accepted: {RequestStatus.playing, RequestStatus.skipped},
    RequestStatus.playing: {RequestStatus.played},
    RequestStatus.played: set(),
    RequestStatus.skipped: set(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SongRequest(Base):
    __tablename__ = "song_requests"

    request_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    show_id = Column(String(36), ForeignKey("shows.show_id"), nullable=False, index=True)
    song_id = Column(String(36), ForeignKey("songs.song_id"), nullable=True)
    custom_title = Column(String(255), nullable=True)
    custom_artist = Column(String(255), nullable=True)
    requester_name = Column(String(100), nullable=False)
    requester_id = Column(String(36), ForeignKey("profiles.profile_id"), nullable=True)
    message = Column(Text, nullable=True)
    tip_amount = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    status = Column(SAEnum(RequestStatus), nullable=False, default=RequestStatus.pending)
    position = Column(Integer, nullable=True)
    flagged = Column(Boolean, nullable=False, default=False)
    flag_reason = Column(String(20), nullable=True)
    # Python-side default keeps microseconds, which the queue ordering relies on
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    played_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    show = relationship("Show", back_populates="requests")
    song = relationship("Song")

    @property
    def title(self) -> str:
        return self.song.title if self.song is not None else self.custom_title

    @property
    def artist(self) -> str:
        return self.song.artist if self.song is not None else self.custom_artist
