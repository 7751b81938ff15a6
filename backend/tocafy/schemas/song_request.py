"""Pydantic schemas for SongRequests."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class SongRequestCreate(BaseModel):
    requester_name: str
    song_id: Optional[str] = None
    custom_title: Optional[str] = None
    custom_artist: Optional[str] = None
    message: Optional[str] = None
    tip_amount: float = Field(0, ge=0)
    requester_id: Optional[str] = None


class SongRequestOut(BaseModel):
    request_id: str
    show_id: str
    song_id: Optional[str] = None
    custom_title: Optional[str] = None
    custom_artist: Optional[str] = None
    title: str
    artist: str
    requester_name: str
    message: Optional[str] = None
    tip_amount: float
    status: str
    position: Optional[int] = None
    flagged: bool
    flag_reason: Optional[str] = None
    created_at: datetime
    accepted_at: Optional[datetime] = None
    played_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PublicQueueItemOut(BaseModel):
    """What the audience sees — no moderation details, no tips."""

    request_id: str
    title: str
    artist: str
    requester_name: str
    status: str
    position: Optional[int] = None

    model_config = {"from_attributes": True}
