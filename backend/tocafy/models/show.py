"""Show ORM model and its status state machine."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from tocafy.database import Base


class ShowStatus(str, enum.Enum):
    draft = "draft"
    live = "live"
    paused = "paused"
    ended = "ended"


# Legal moves; ended is terminal.
SHOW_TRANSITIONS = {
    ShowStatus.draft: {ShowStatus.live},
    ShowStatus.live: {ShowStatus.paused, ShowStatus.ended},
    ShowStatus.paused: {ShowStatus.live, ShowStatus.ended},
    ShowStatus.ended: set(),
}


class Show(Base):
    __tablename__ = "shows"

    show_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), ForeignKey("profiles.profile_id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    status = Column(SAEnum(ShowStatus), nullable=False, default=ShowStatus.draft)
    public_code = Column(String(120), nullable=True, unique=True)
    version = Column(Integer, nullable=False, default=1)
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("Profile")
    requests = relationship("SongRequest", back_populates="show")
