"""Profile API routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tocafy.database import get_db
from tocafy.models.profile import Profile
from tocafy.schemas.profile import ProfileCreate, ProfileOut
from tocafy.services import profile_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def create_profile(payload: ProfileCreate, db: Session = Depends(get_db)):
    """Register the profile record for an identity (artist or audience)."""
    return profile_service.create_profile(db, payload.username, payload.display_name, payload.role)


@router.get("/", response_model=list[ProfileOut])
def list_profiles(db: Session = Depends(get_db)):
    return db.query(Profile).order_by(Profile.username).all()


@router.get("/{profile_id}", response_model=ProfileOut)
def get_profile(profile_id: str, db: Session = Depends(get_db)):
    return profile_service.get_profile(db, profile_id)
