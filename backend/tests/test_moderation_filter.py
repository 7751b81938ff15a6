"""Tests for the pure moderation filter."""
from datetime import datetime, timedelta, timezone

import pytest

from tocafy.services.moderation_filter import (
    Candidate,
    FlagReason,
    ModerationRules,
    Verdict,
    VerdictKind,
    check,
    count_recent,
    normalize_words,
)

NOW = datetime(2026, 10, 19, 21, 0, tzinfo=timezone.utc)


def _minutes_ago(*minutes):
    return [NOW - timedelta(minutes=m) for m in minutes]


class TestProfanity:

    def test_blocked_word_in_message_flags(self):
        rules = ModerationRules(blocked_words=("spam",), profanity_filter=True)
        verdict = check(rules, Candidate("Ana", "Song", "Artist", "this is spam"), [], NOW)
        assert verdict == Verdict.flag(FlagReason.profanity)

    @pytest.mark.parametrize("field", ["title", "artist", "message"])
    def test_match_is_case_insensitive_on_every_field(self, field):
        rules = ModerationRules(blocked_words=("Badword",))
        values = {"title": "ok", "artist": "ok", "message": "ok", field: "xxBADWORDxx"}
        verdict = check(rules, Candidate("Ana", **values), [], NOW)
        assert verdict.reason == FlagReason.profanity

    def test_phrase_spanning_two_fields_is_not_a_match(self):
        rules = ModerationRules(blocked_words=("foo bar",), spam_prevention=False)
        verdict = check(rules, Candidate("Ana", title="x foo", artist="bar y"), [], NOW)
        assert verdict == Verdict.admit()

    def test_phrase_inside_one_field_flags(self):
        rules = ModerationRules(blocked_words=("foo bar",), spam_prevention=False)
        verdict = check(rules, Candidate("Ana", title="Song", artist="Band", message="so foo bar"), [], NOW)
        assert verdict == Verdict.flag(FlagReason.profanity)

    def test_requester_name_not_checked(self):
        rules = ModerationRules(blocked_words=("spam",))
        assert check(rules, Candidate("spammy", "Song", "Artist"), [], NOW).kind == VerdictKind.admit

    def test_filter_disabled(self):
        rules = ModerationRules(blocked_words=("spam",), profanity_filter=False)
        assert check(rules, Candidate("Ana", "spam", "spam", "spam"), [], NOW) == Verdict.admit()


class TestSpam:

    def test_limit_reached_flags(self):
        rules = ModerationRules(request_limit=3, time_window_minutes=15)
        verdict = check(rules, Candidate("Ana", "Song", "Artist"), _minutes_ago(1, 5, 10), NOW)
        assert verdict == Verdict.flag(FlagReason.spam)

    def test_under_limit_admits(self):
        rules = ModerationRules(request_limit=3, time_window_minutes=15)
        assert check(rules, Candidate("Ana", "Song", "Artist"), _minutes_ago(1, 5), NOW).kind == VerdictKind.admit

    def test_old_requests_fall_out_of_window(self):
        rules = ModerationRules(request_limit=3, time_window_minutes=15)
        verdict = check(rules, Candidate("Ana", "Song", "Artist"), _minutes_ago(1, 20, 40), NOW)
        assert verdict.kind == VerdictKind.admit

    def test_spam_prevention_disabled(self):
        rules = ModerationRules(spam_prevention=False, request_limit=1)
        assert check(rules, Candidate("Ana", "Song", "Artist"), _minutes_ago(1, 2, 3), NOW).kind == VerdictKind.admit

    def test_naive_history_treated_as_utc(self):
        naive = [ts.replace(tzinfo=None) for ts in _minutes_ago(1, 2)]
        assert count_recent(naive, NOW, 15) == 2


class TestManualAndReject:

    def test_require_moderation_holds_everything(self):
        rules = ModerationRules(require_moderation=True)
        assert check(rules, Candidate("Ana", "Song", "Artist"), [], NOW) == Verdict.flag(FlagReason.manual)

    def test_profanity_reason_wins_over_manual(self):
        rules = ModerationRules(blocked_words=("spam",), require_moderation=True)
        assert check(rules, Candidate("Ana", "spam", "x"), [], NOW).reason == FlagReason.profanity

    def test_auto_reject_turns_hits_into_rejections(self):
        rules = ModerationRules(blocked_words=("spam",), auto_reject=True)
        assert check(rules, Candidate("Ana", "spam", "x"), [], NOW) == Verdict.reject(FlagReason.profanity)

        spam_rules = ModerationRules(request_limit=1, auto_reject=True)
        assert check(spam_rules, Candidate("Ana", "a", "b"), _minutes_ago(1), NOW) == Verdict.reject(FlagReason.spam)

    def test_auto_reject_never_rejects_manual_review(self):
        rules = ModerationRules(require_moderation=True, auto_reject=True)
        assert check(rules, Candidate("Ana", "a", "b"), [], NOW).kind == VerdictKind.flag


def test_check_is_deterministic():
    rules = ModerationRules(blocked_words=("spam",), request_limit=2)
    candidate = Candidate("Ana", "Song", "Artist", "hello")
    history = _minutes_ago(3)
    verdicts = {check(rules, candidate, history, NOW) for _ in range(20)}
    assert verdicts == {Verdict.admit()}


def test_normalize_words():
    assert normalize_words([" Spam ", "spam", "", "  ", "Palavra"]) == ("spam", "palavra")
