"""Show codes — human-shareable slugs used in audience join links.

A code is ``<username-slug>-<show-name-slug>``; on collision the next free
numeric suffix (``-2``, ``-3``, …) is taken, so an existing code is never
overwritten and a retried generation lands on the next free value.
"""
import logging
import re
import unicodedata
import uuid
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy.orm import Session

from tocafy.errors import NotFoundError, ValidationError
from tocafy.models.show import Show, ShowStatus

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[a-z0-9_-]+$")
_NON_SLUG = re.compile(r"[^a-z0-9]+")
_LINK_PREFIXES = ("audience", "show")


def slugify(text: str) -> str:
    """Lowercase ASCII slug: accents dropped, non-alphanumeric runs collapsed to '-'."""
    normalized = unicodedata.normalize("NFKD", text or "")
    ascii_text = "".join(c for c in normalized if not unicodedata.combining(c))
    return _NON_SLUG.sub("-", ascii_text.lower()).strip("-")


def validate_username(username: str) -> str:
    if not username:
        raise ValidationError("Username is required")
    if not USERNAME_PATTERN.match(username):
        raise ValidationError("Username may only contain lowercase letters, digits, '_' and '-'")
    return username


def _code_taken(db: Session, code: str) -> bool:
    return db.query(Show.show_id).filter(Show.public_code == code).first() is not None


def generate_code(db: Session, username: str, show_name: str) -> str:
    """Return the first unused code for this username/show name pair."""
    validate_username(username)
    base = "-".join(part for part in (slugify(username), slugify(show_name)) if part)
    if not base:
        raise ValidationError("Cannot build a show code from an empty username")

    code = base
    suffix = 1
    while _code_taken(db, code):
        suffix += 1
        code = f"{base}-{suffix}"
    return code


def extract_code(raw: str) -> str:
    """Accept a bare code, '@code', or a full ``/audience/<code>`` / ``/show/<id>`` link."""
    value = (raw or "").strip()
    if "/" in value:
        segments = [s for s in urlparse(value).path.split("/") if s]
        for prefix in _LINK_PREFIXES:
            if prefix in segments:
                index = segments.index(prefix)
                if index + 1 < len(segments):
                    return segments[index + 1]
        value = segments[-1] if segments else ""
    return value.lstrip("@").strip()


def _as_show_id(code: str) -> Optional[str]:
    try:
        return str(uuid.UUID(code))
    except ValueError:
        return None


def resolve(db: Session, raw_code: str, audience: bool = True) -> Show:
    """Map a code (or direct-id link) to its show.

    Audience joins only see live shows; artist-facing lookups ignore status.
    """
    code = extract_code(raw_code)
    if not code:
        raise NotFoundError("Show not found")

    show = db.query(Show).filter(Show.public_code == code.lower()).first()
    if show is None:
        # Older links carry the raw show id instead of a code
        show_id = _as_show_id(code)
        if show_id is not None:
            show = db.query(Show).filter(Show.show_id == show_id).first()

    if show is None:
        raise NotFoundError("Show not found")
    if audience and show.status != ShowStatus.live:
        logger.info("Audience lookup of %s refused: show %s is %s", code, show.show_id, show.status.value)
        raise NotFoundError("Show not found or not live")
    return show
