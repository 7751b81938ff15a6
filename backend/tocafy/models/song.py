"""Song ORM model — an artist's catalog entry."""
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, Integer, ForeignKey
from sqlalchemy.sql import func
from tocafy.database import Base


class Song(Base):
    __tablename__ = "songs"

    song_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), ForeignKey("profiles.profile_id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    artist = Column(String(255), nullable=False)
    key = Column(String(10), nullable=True)  # musical key, e.g. "Am"
    genre = Column(String(100), nullable=True)
    lyrics = Column(Text, nullable=True)
    chords = Column(Text, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    cover_url = Column(String(500), nullable=True)
    external_id = Column(String(100), nullable=True)  # catalog search provider id
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
