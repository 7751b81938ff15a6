"""Moderation config storage — per artist with optional per-show override."""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from tocafy.config import settings
from tocafy.errors import AuthorizationError, NotFoundError
from tocafy.models.moderation_config import ModerationConfig
from tocafy.models.show import Show
from tocafy.services.locking import commit
from tocafy.services.moderation_filter import ModerationRules, normalize_words
from tocafy.services.profile_service import require_artist

logger = logging.getLogger(__name__)


def default_rules() -> ModerationRules:
    return ModerationRules(
        request_limit=settings.DEFAULT_REQUEST_LIMIT,
        time_window_minutes=settings.DEFAULT_TIME_WINDOW_MINUTES,
    )


def to_rules(config: ModerationConfig) -> ModerationRules:
    return ModerationRules(
        blocked_words=normalize_words(config.blocked_words or []),
        profanity_filter=config.profanity_filter,
        spam_prevention=config.spam_prevention,
        request_limit=config.request_limit,
        time_window_minutes=config.time_window_minutes,
        require_moderation=config.require_moderation,
        auto_reject=config.auto_reject,
    )


def _find(db: Session, artist_id: str, show_id: Optional[str]) -> Optional[ModerationConfig]:
    query = db.query(ModerationConfig).filter(ModerationConfig.artist_id == artist_id)
    if show_id is None:
        query = query.filter(ModerationConfig.show_id.is_(None))
    else:
        query = query.filter(ModerationConfig.show_id == show_id)
    return query.first()


def effective_rules(db: Session, artist_id: str, show_id: Optional[str] = None) -> ModerationRules:
    """Show override, else the artist's config, else defaults."""
    config = None
    if show_id is not None:
        config = _find(db, artist_id, show_id)
    if config is None:
        config = _find(db, artist_id, None)
    return to_rules(config) if config else default_rules()


def save_config(
    db: Session,
    artist_id: str,
    actor_id: str,
    updates: dict[str, Any],
    show_id: Optional[str] = None,
) -> ModerationRules:
    """Create or partially update the artist's (or one show's) moderation config."""
    if actor_id != artist_id:
        raise AuthorizationError("Only the artist may change their moderation settings")
    require_artist(db, artist_id)
    if show_id is not None:
        show = db.query(Show).filter(Show.show_id == show_id).first()
        if not show:
            raise NotFoundError("Show not found")
        if show.owner_id != artist_id:
            raise AuthorizationError("Show belongs to another artist")

    config = _find(db, artist_id, show_id)
    if config is None:
        # Start from what currently applies so a partial update keeps the rest
        base = effective_rules(db, artist_id, show_id)
        config = ModerationConfig(
            artist_id=artist_id,
            show_id=show_id,
            blocked_words=list(base.blocked_words),
            profanity_filter=base.profanity_filter,
            spam_prevention=base.spam_prevention,
            request_limit=base.request_limit,
            time_window_minutes=base.time_window_minutes,
            require_moderation=base.require_moderation,
            auto_reject=base.auto_reject,
        )
        db.add(config)

    for field, value in updates.items():
        if field == "blocked_words":
            value = list(normalize_words(value))
        setattr(config, field, value)

    commit(db)
    db.refresh(config)
    logger.info("Saved moderation config for artist %s (show %s): %s", artist_id, show_id, sorted(updates))
    return to_rules(config)
