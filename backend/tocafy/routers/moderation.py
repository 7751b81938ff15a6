"""Moderation settings API routes."""
import logging
from dataclasses import asdict
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tocafy.database import get_db
from tocafy.schemas.moderation import ModerationOut, ModerationUpdate
from tocafy.services import moderation_service
from tocafy.services.profile_service import require_artist

logger = logging.getLogger(__name__)
router = APIRouter()


def _out(rules) -> ModerationOut:
    data = asdict(rules)
    data["blocked_words"] = list(data["blocked_words"])
    return ModerationOut(**data)


@router.get("/{artist_id}", response_model=ModerationOut)
def get_settings(artist_id: str, show_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Settings in effect for the artist (or for one of their shows)."""
    require_artist(db, artist_id)
    return _out(moderation_service.effective_rules(db, artist_id, show_id))


@router.put("/{artist_id}", response_model=ModerationOut)
def update_settings(
    artist_id: str,
    payload: ModerationUpdate,
    actor_id: str = Query(..., description="ID of the artist saving the settings"),
    show_id: Optional[str] = Query(None, description="Scope the settings to one show"),
    db: Session = Depends(get_db),
):
    rules = moderation_service.save_config(
        db,
        artist_id=artist_id,
        actor_id=actor_id,
        updates=payload.model_dump(exclude_unset=True),
        show_id=show_id,
    )
    return _out(rules)
