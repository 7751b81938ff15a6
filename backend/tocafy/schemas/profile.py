"""Pydantic schemas for Profiles."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ProfileCreate(BaseModel):
    username: str
    display_name: Optional[str] = None
    role: str = "audience"  # artist, audience


class ProfileOut(BaseModel):
    profile_id: str
    username: str
    display_name: Optional[str] = None
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}
