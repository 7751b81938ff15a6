"""Pydantic schemas for moderation settings."""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from tocafy.services.moderation_filter import normalize_words


class ModerationUpdate(BaseModel):
    """Partial update; unknown keys are rejected and omitted keys keep their value."""

    blocked_words: Optional[list[str]] = None
    profanity_filter: Optional[bool] = None
    spam_prevention: Optional[bool] = None
    request_limit: Optional[int] = Field(None, gt=0)
    time_window_minutes: Optional[int] = Field(None, gt=0)
    require_moderation: Optional[bool] = None
    auto_reject: Optional[bool] = None

    model_config = {"extra": "forbid"}

    @field_validator("*")
    @classmethod
    def _no_explicit_null(cls, value):
        # Every setting is stored NOT NULL; omit a key to leave it unchanged
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @field_validator("blocked_words")
    @classmethod
    def _clean_words(cls, words):
        if words is None:
            return words
        return list(normalize_words(words))


class ModerationOut(BaseModel):
    blocked_words: list[str]
    profanity_filter: bool
    spam_prevention: bool
    request_limit: int
    time_window_minutes: int
    require_moderation: bool
    auto_reject: bool
