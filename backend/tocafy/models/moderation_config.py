"""ModerationConfig ORM model — per artist, optionally overridden per show."""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Integer, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from tocafy.database import Base


class ModerationConfig(Base):
    __tablename__ = "moderation_configs"
    __table_args__ = (UniqueConstraint("artist_id", "show_id", name="uq_moderation_scope"),)

    config_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    artist_id = Column(String(36), ForeignKey("profiles.profile_id"), nullable=False)
    show_id = Column(String(36), ForeignKey("shows.show_id"), nullable=True)
    blocked_words = Column(JSON, nullable=False, default=list)
    profanity_filter = Column(Boolean, nullable=False, default=True)
    spam_prevention = Column(Boolean, nullable=False, default=True)
    request_limit = Column(Integer, nullable=False, default=3)
    time_window_minutes = Column(Integer, nullable=False, default=15)
    require_moderation = Column(Boolean, nullable=False, default=False)
    auto_reject = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
