"""ShowActivity ORM model — append-only ledger of show and request state changes.

Clients poll it with ``after=<activity_id>`` to apply incremental updates.
"""
import enum
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from tocafy.database import Base


class ActivityEntity(str, enum.Enum):
    show = "show"
    song_request = "song_request"


class ShowActivity(Base):
    __tablename__ = "show_activity"

    activity_id = Column(Integer, primary_key=True, autoincrement=True)
    show_id = Column(String(36), ForeignKey("shows.show_id"), nullable=False, index=True)
    entity = Column(SAEnum(ActivityEntity), nullable=False)
    entity_id = Column(String(36), nullable=False)
    new_state = Column(String(20), nullable=False)
    actor_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
