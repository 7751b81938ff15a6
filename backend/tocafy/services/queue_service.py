"""Request queue — admission, ordering and playback state of song requests.

Invariants (all mutations run inside ``show_transaction`` for the request's show):
- requests are only created while the show is live
- a request names either a catalog song or a custom title+artist pair, never both
- active requests (pending/accepted) hold positions exactly 1..N, ordered by
  submission time; positions are renumbered whenever a request leaves the set
- at most one request per show is ``playing``; starting another one completes it
- pending → accepted → playing → played, skip from pending/accepted; played and
  skipped are terminal
- tips are recorded but never influence ordering
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from tocafy.errors import (
    AuthorizationError,
    InvalidTransitionError,
    ModerationRejectedError,
    NotFoundError,
    ShowNotLiveError,
    ValidationError,
)
from tocafy.models.show import ShowStatus
from tocafy.models.show_activity import ActivityEntity
from tocafy.models.song_request import ACTIVE_STATUSES, REQUEST_TRANSITIONS, RequestStatus, SongRequest
from tocafy.services import moderation_filter
from tocafy.services.locking import ShowScope, show_transaction
from tocafy.services.moderation_filter import Candidate, VerdictKind
from tocafy.services.moderation_service import effective_rules
from tocafy.services.profile_service import get_profile
from tocafy.services.song_service import require_requestable

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_request(db: Session, request_id: str) -> SongRequest:
    req = db.query(SongRequest).filter(SongRequest.request_id == request_id).first()
    if not req:
        raise NotFoundError("Song request not found")
    return req


def _active_query(db: Session, show_id: str):
    return db.query(SongRequest).filter(
        SongRequest.show_id == show_id,
        SongRequest.status.in_(ACTIVE_STATUSES),
    )


def _renumber(db: Session, show_id: str) -> None:
    """Dense 1..N positions for the active set, earliest submission first."""
    db.flush()
    active = (
        _active_query(db, show_id)
        .populate_existing()
        .order_by(SongRequest.created_at, SongRequest.position, SongRequest.request_id)
        .all()
    )
    for index, req in enumerate(active, start=1):
        if req.position != index:
            req.position = index


def _requester_history(db: Session, show_id: str, requester_name: str) -> list[datetime]:
    rows = (
        db.query(SongRequest.created_at)
        .filter(
            SongRequest.show_id == show_id,
            func.lower(SongRequest.requester_name) == requester_name.lower(),
        )
        .all()
    )
    return [row[0] for row in rows]


def submit(
    db: Session,
    show_id: str,
    requester_name: str,
    song_id: Optional[str] = None,
    custom_title: Optional[str] = None,
    custom_artist: Optional[str] = None,
    message: Optional[str] = None,
    tip_amount: float = 0,
    requester_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SongRequest:
    """Admit an audience request into the show's queue.

    A moderation ``flag`` still stores the request (pending, ``flagged=True``);
    only a ``reject`` raises.
    """
    requester_name = _clean(requester_name)
    custom_title = _clean(custom_title)
    custom_artist = _clean(custom_artist)
    message = _clean(message)

    with show_transaction(db, show_id) as scope:
        # Taken under the lock so created_at follows serialization order
        now = now or datetime.now(timezone.utc)
        show = scope.show
        if show.status != ShowStatus.live:
            raise ShowNotLiveError(f"Show is {show.status.value}; requests are closed")

        if not requester_name:
            raise ValidationError("Requester name is required")
        if tip_amount is None or tip_amount < 0:
            raise ValidationError("Tip amount cannot be negative")
        if requester_id is not None:
            try:
                get_profile(db, requester_id)
            except NotFoundError:
                raise ValidationError("Requester profile does not exist")
        if song_id and (custom_title or custom_artist):
            raise ValidationError("Request either a catalog song or a custom song, not both")
        if song_id:
            song = require_requestable(db, song_id, show.owner_id)
            title, artist = song.title, song.artist
        elif custom_title and custom_artist:
            title, artist = custom_title, custom_artist
        else:
            raise ValidationError("A catalog song or both custom title and artist are required")

        rules = effective_rules(db, show.owner_id, show.show_id)
        verdict = moderation_filter.check(
            rules,
            Candidate(requester_name=requester_name, title=title, artist=artist, message=message),
            _requester_history(db, show.show_id, requester_name),
            now,
        )
        if verdict.kind == VerdictKind.reject:
            logger.info("Rejected request from '%s' on show %s (%s)", requester_name, show_id, verdict.reason.value)
            raise ModerationRejectedError(verdict.reason.value)

        last_position = (
            _active_query(db, show.show_id)
            .with_entities(func.coalesce(func.max(SongRequest.position), 0))
            .scalar()
        )
        req = SongRequest(
            show_id=show.show_id,
            song_id=song_id or None,
            custom_title=None if song_id else custom_title,
            custom_artist=None if song_id else custom_artist,
            requester_name=requester_name,
            requester_id=requester_id,
            message=message,
            tip_amount=tip_amount,
            status=RequestStatus.pending,
            position=(last_position or 0) + 1,
            flagged=verdict.kind == VerdictKind.flag,
            flag_reason=verdict.reason.value if verdict.reason else None,
            created_at=now,
        )
        db.add(req)
        db.flush()
        scope.emit(ActivityEntity.song_request, req.request_id, req.status.value, requester_id)

    db.refresh(req)
    logger.info(
        "Queued request %s on show %s at position %s%s",
        req.request_id, show_id, req.position,
        f" (flagged: {req.flag_reason})" if req.flagged else "",
    )
    return req


def _locked_request(db: Session, scope: ShowScope, request_id: str, actor_id: str) -> SongRequest:
    # Re-read under the show lock; the copy loaded before locking may be stale
    req = (
        db.query(SongRequest)
        .filter(SongRequest.request_id == request_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not req:
        raise NotFoundError("Song request not found")
    if scope.show.owner_id != actor_id:
        raise AuthorizationError("Only the show's artist may manage its requests")
    return req


def _require_move(req: SongRequest, target: RequestStatus) -> None:
    if target not in REQUEST_TRANSITIONS[req.status]:
        raise InvalidTransitionError(f"Cannot move request from {req.status.value} to {target.value}")


def _show_id_of(db: Session, request_id: str) -> str:
    return get_request(db, request_id).show_id


def accept(db: Session, request_id: str, actor_id: str) -> SongRequest:
    """pending → accepted. Accepting a flagged request is the artist's manual approval."""
    with show_transaction(db, _show_id_of(db, request_id)) as scope:
        req = _locked_request(db, scope, request_id, actor_id)
        _require_move(req, RequestStatus.accepted)
        req.status = RequestStatus.accepted
        req.accepted_at = datetime.now(timezone.utc)
        req.flagged = False
        scope.emit(ActivityEntity.song_request, req.request_id, req.status.value, actor_id)

    db.refresh(req)
    logger.info("Request %s accepted by %s", request_id, actor_id)
    return req


def play(db: Session, request_id: str, actor_id: str) -> SongRequest:
    """accepted → playing; whatever was playing on the show becomes played."""
    with show_transaction(db, _show_id_of(db, request_id)) as scope:
        req = _locked_request(db, scope, request_id, actor_id)
        _require_move(req, RequestStatus.playing)

        now = datetime.now(timezone.utc)
        current = (
            db.query(SongRequest)
            .filter(
                SongRequest.show_id == req.show_id,
                SongRequest.status == RequestStatus.playing,
                SongRequest.request_id != req.request_id,
            )
            .populate_existing()
            .all()
        )
        for other in current:
            other.status = RequestStatus.played
            other.played_at = now
            scope.emit(ActivityEntity.song_request, other.request_id, other.status.value, actor_id)

        req.status = RequestStatus.playing
        req.position = None
        req.played_at = now
        scope.emit(ActivityEntity.song_request, req.request_id, req.status.value, actor_id)
        _renumber(db, req.show_id)

    db.refresh(req)
    logger.info("Request %s now playing on show %s", request_id, req.show_id)
    return req


def complete(db: Session, request_id: str, actor_id: str) -> SongRequest:
    """playing → played."""
    with show_transaction(db, _show_id_of(db, request_id)) as scope:
        req = _locked_request(db, scope, request_id, actor_id)
        _require_move(req, RequestStatus.played)
        req.status = RequestStatus.played
        if req.played_at is None:
            req.played_at = datetime.now(timezone.utc)
        scope.emit(ActivityEntity.song_request, req.request_id, req.status.value, actor_id)

    db.refresh(req)
    logger.info("Request %s played", request_id)
    return req


def skip(db: Session, request_id: str, actor_id: str) -> SongRequest:
    """pending/accepted → skipped. Also how the artist rejects a flagged request."""
    with show_transaction(db, _show_id_of(db, request_id)) as scope:
        req = _locked_request(db, scope, request_id, actor_id)
        _require_move(req, RequestStatus.skipped)
        req.status = RequestStatus.skipped
        req.position = None
        scope.emit(ActivityEntity.song_request, req.request_id, req.status.value, actor_id)
        _renumber(db, req.show_id)

    db.refresh(req)
    logger.info("Request %s skipped by %s", request_id, actor_id)
    return req


def recompute_positions(db: Session, show_id: str) -> list[SongRequest]:
    """Renumber the active set on demand and return it in queue order."""
    with show_transaction(db, show_id):
        _renumber(db, show_id)
    return list_queue(db, show_id)


def list_queue(db: Session, show_id: str, include_flagged: bool = True) -> list[SongRequest]:
    query = _active_query(db, show_id)
    if not include_flagged:
        query = query.filter(SongRequest.flagged.is_(False))
    return query.order_by(SongRequest.position).all()


def list_requests(db: Session, show_id: str, status: Optional[RequestStatus] = None, flagged: Optional[bool] = None) -> list[SongRequest]:
    query = db.query(SongRequest).filter(SongRequest.show_id == show_id)
    if status:
        query = query.filter(SongRequest.status == status)
    if flagged is not None:
        query = query.filter(SongRequest.flagged.is_(flagged))
    return query.order_by(SongRequest.created_at).all()


def now_playing(db: Session, show_id: str) -> Optional[SongRequest]:
    return (
        db.query(SongRequest)
        .filter(SongRequest.show_id == show_id, SongRequest.status == RequestStatus.playing)
        .first()
    )
