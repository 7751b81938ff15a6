"""Profile ORM model — artists own shows and songs, audience members only request."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, Enum as SAEnum
from sqlalchemy.sql import func
from tocafy.database import Base


class ProfileRole(str, enum.Enum):
    artist = "artist"
    audience = "audience"


class Profile(Base):
    __tablename__ = "profiles"

    profile_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), nullable=False, unique=True)
    display_name = Column(String(100), nullable=True)
    role = Column(SAEnum(ProfileRole), nullable=False, default=ProfileRole.audience)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
