"""Profile lookups and the artist-only ownership rule."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from tocafy.errors import AuthorizationError, NotFoundError, ValidationError
from tocafy.models.profile import Profile, ProfileRole
from tocafy.services.code_resolver import validate_username
from tocafy.services.locking import commit

logger = logging.getLogger(__name__)


def create_profile(db: Session, username: str, display_name: Optional[str], role: str) -> Profile:
    username = validate_username((username or "").strip())
    try:
        profile_role = ProfileRole(role)
    except ValueError:
        raise ValidationError(f"Invalid role: {role}")
    if db.query(Profile.profile_id).filter(Profile.username == username).first():
        raise ValidationError(f"Username '{username}' is already taken")

    profile = Profile(username=username, display_name=display_name, role=profile_role)
    db.add(profile)
    commit(db)
    db.refresh(profile)
    logger.info("Created %s profile %s (@%s)", profile_role.value, profile.profile_id, username)
    return profile


def get_profile(db: Session, profile_id: str) -> Profile:
    profile = db.query(Profile).filter(Profile.profile_id == profile_id).first()
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


def require_artist(db: Session, profile_id: str) -> Profile:
    profile = get_profile(db, profile_id)
    if profile.role != ProfileRole.artist:
        raise AuthorizationError("Only artist profiles may do this")
    return profile
