"""Moderation filter — pure admission check run before a request is stored.

``check`` has no hidden state: the config, the candidate, the requester's
recent request times and ``now`` fully determine the verdict.

Order of rules:
1. profanity: any blocked word found (case-insensitive) in title, artist or message;
2. spam: the requester already has ``request_limit`` requests inside the window;
3. manual review: every remaining candidate is held when moderation is required.

A profanity/spam hit is a ``flag`` (stored, held for the artist) unless
``auto_reject`` is on, in which case it is a ``reject``.
"""
import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional


class VerdictKind(str, enum.Enum):
    admit = "admit"
    flag = "flag"
    reject = "reject"


class FlagReason(str, enum.Enum):
    profanity = "profanity"
    spam = "spam"
    manual = "manual"


@dataclass(frozen=True)
class Verdict:
    kind: VerdictKind
    reason: Optional[FlagReason] = None

    @classmethod
    def admit(cls) -> "Verdict":
        return cls(VerdictKind.admit)

    @classmethod
    def flag(cls, reason: FlagReason) -> "Verdict":
        return cls(VerdictKind.flag, reason)

    @classmethod
    def reject(cls, reason: FlagReason) -> "Verdict":
        return cls(VerdictKind.reject, reason)


@dataclass(frozen=True)
class ModerationRules:
    """Effective moderation settings for one submission."""

    blocked_words: tuple[str, ...] = ()
    profanity_filter: bool = True
    spam_prevention: bool = True
    request_limit: int = 3
    time_window_minutes: int = 15
    require_moderation: bool = False
    auto_reject: bool = False


@dataclass(frozen=True)
class Candidate:
    requester_name: str
    title: Optional[str] = None
    artist: Optional[str] = None
    message: Optional[str] = None


def normalize_words(words: Iterable[str]) -> tuple[str, ...]:
    """Trim, lowercase, drop empties and duplicates (first occurrence wins)."""
    seen: dict[str, None] = {}
    for word in words:
        cleaned = (word or "").strip().lower()
        if cleaned:
            seen.setdefault(cleaned, None)
    return tuple(seen)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def contains_blocked_word(rules: ModerationRules, candidate: Candidate) -> bool:
    """True if a blocked word occurs inside any single field; fields are never joined."""
    words = normalize_words(rules.blocked_words)
    fields = [part.lower() for part in (candidate.title, candidate.artist, candidate.message) if part]
    return any(word in part for part in fields for word in words)


def count_recent(history: Iterable[datetime], now: datetime, window_minutes: int) -> int:
    now = _as_utc(now)
    cutoff = now - timedelta(minutes=window_minutes)
    return sum(1 for ts in history if cutoff <= _as_utc(ts) <= now)


def check(
    rules: ModerationRules,
    candidate: Candidate,
    recent_requests: Iterable[datetime],
    now: datetime,
) -> Verdict:
    """Decide admit / flag / reject for a candidate request.

    ``recent_requests`` are the creation times of earlier requests by the same
    requester name on the same show.
    """
    hit: Optional[FlagReason] = None
    if rules.profanity_filter and contains_blocked_word(rules, candidate):
        hit = FlagReason.profanity
    elif rules.spam_prevention and count_recent(recent_requests, now, rules.time_window_minutes) >= rules.request_limit:
        hit = FlagReason.spam

    if hit is not None:
        return Verdict.reject(hit) if rules.auto_reject else Verdict.flag(hit)
    if rules.require_moderation:
        return Verdict.flag(FlagReason.manual)
    return Verdict.admit()
