"""Pydantic schemas for catalog Songs."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class SongCreate(BaseModel):
    owner_id: str
    title: str
    artist: str
    key: Optional[str] = None
    genre: Optional[str] = None
    lyrics: Optional[str] = None
    chords: Optional[str] = None
    duration_seconds: Optional[int] = Field(None, ge=0)
    cover_url: Optional[str] = None
    external_id: Optional[str] = None
    is_available: bool = True


class SongUpdate(BaseModel):
    title: Optional[str] = None
    artist: Optional[str] = None
    key: Optional[str] = None
    genre: Optional[str] = None
    lyrics: Optional[str] = None
    chords: Optional[str] = None
    duration_seconds: Optional[int] = Field(None, ge=0)
    cover_url: Optional[str] = None
    is_available: Optional[bool] = None

    model_config = {"extra": "forbid"}

    @field_validator("title", "artist", "is_available")
    @classmethod
    def _required_not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class SongOut(BaseModel):
    song_id: str
    owner_id: str
    title: str
    artist: str
    key: Optional[str] = None
    genre: Optional[str] = None
    lyrics: Optional[str] = None
    chords: Optional[str] = None
    duration_seconds: Optional[int] = None
    cover_url: Optional[str] = None
    external_id: Optional[str] = None
    is_available: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class PublicSongOut(BaseModel):
    song_id: str
    title: str
    artist: str
    key: Optional[str] = None
    genre: Optional[str] = None
    cover_url: Optional[str] = None

    model_config = {"from_attributes": True}
