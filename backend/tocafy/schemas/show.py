"""Pydantic schemas for Shows."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ShowCreate(BaseModel):
    owner_id: str
    name: str
    description: Optional[str] = None
    location: Optional[str] = None


class ShowTransition(BaseModel):
    target_status: str  # live, paused, ended
    actor_id: str


class ShowOut(BaseModel):
    show_id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    status: str
    public_code: Optional[str] = None
    share_url: Optional[str] = None
    stage_url: Optional[str] = None
    version: int
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ShowStatusOut(BaseModel):
    show_id: str
    status: str


class ActivityOut(BaseModel):
    activity_id: int
    entity: str
    entity_id: str
    show_id: str
    new_state: str
    actor_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
