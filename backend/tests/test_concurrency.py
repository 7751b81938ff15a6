"""Per-show serialization, retry and change notification tests (service level)."""
from concurrent.futures import ThreadPoolExecutor

import pytest

from tocafy.errors import ConflictError, PersistenceTimeoutError
from tocafy.models.profile import Profile, ProfileRole
from tocafy.models.show import Show, ShowStatus
from tocafy.models.song_request import RequestStatus, SongRequest
from tocafy.services import queue_service, show_service
from tocafy.services.locking import ShowLocks, call_with_retry, show_locks, show_transaction
from tocafy.services.notifier import ChangeNotifier, ChangeEvent, notifier


@pytest.fixture
def live_show(db):
    artist = Profile(username="dj_ana", role=ProfileRole.artist)
    db.add(artist)
    db.commit()
    show = show_service.create_show(db, artist.profile_id, "Acoustic Night")
    show = show_service.transition(db, show.show_id, ShowStatus.live, artist.profile_id)
    return show.show_id, artist.profile_id


def _in_new_session(session_factory, func, *args, **kwargs):
    session = session_factory()
    try:
        result = func(session, *args, **kwargs)
        return result.request_id
    finally:
        session.close()


class TestConcurrentQueue:

    def test_concurrent_submits_get_dense_positions(self, db, session_factory, live_show):
        show_id, _ = live_show
        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [
                pool.submit(_in_new_session, session_factory, queue_service.submit, show_id,
                            requester_name=f"Fan {i}", custom_title=f"Song {i}", custom_artist="Band")
                for i in range(16)
            ]
            ids = [f.result() for f in futures]

        assert len(set(ids)) == 16
        positions = sorted(r.position for r in queue_service.list_queue(db, show_id))
        assert positions == list(range(1, 17))

    def test_concurrent_plays_leave_one_playing(self, db, session_factory, live_show):
        show_id, owner = live_show
        reqs = [
            queue_service.submit(db, show_id, requester_name=f"Fan {i}", custom_title="S", custom_artist="A")
            for i in range(6)
        ]
        for req in reqs:
            queue_service.accept(db, req.request_id, owner)

        with ThreadPoolExecutor(max_workers=6) as pool:
            futures = [
                pool.submit(_in_new_session, session_factory, queue_service.play, req.request_id, owner)
                for req in reqs
            ]
            for f in futures:
                f.result()

        db.expire_all()
        statuses = [r.status for r in db.query(SongRequest).filter(SongRequest.show_id == show_id)]
        assert statuses.count(RequestStatus.playing) == 1
        assert statuses.count(RequestStatus.played) == 5
        assert queue_service.list_queue(db, show_id) == []

    def test_positions_follow_submission_order_after_removals(self, db, live_show):
        show_id, owner = live_show
        reqs = [
            queue_service.submit(db, show_id, requester_name=name, custom_title="S", custom_artist="A")
            for name in ("A", "B", "C", "D", "E")
        ]
        queue_service.skip(db, reqs[2].request_id, owner)
        queue_service.accept(db, reqs[0].request_id, owner)
        queue_service.play(db, reqs[0].request_id, owner)

        queue = queue_service.recompute_positions(db, show_id)
        assert [(r.requester_name, r.position) for r in queue] == [("B", 1), ("D", 2), ("E", 3)]


class TestExclusionScope:

    def test_lock_wait_is_bounded(self, db, live_show):
        show_id, owner = live_show
        lock = show_locks.get(show_id)
        lock.acquire()
        try:
            with pytest.raises(PersistenceTimeoutError):
                with show_transaction(db, show_id, timeout=0.05):
                    pass
        finally:
            lock.release()

    def test_other_shows_are_not_blocked(self, db, live_show):
        show_id, owner = live_show
        other = show_service.create_show(db, owner, "Second Set")
        lock = show_locks.get(show_id)
        lock.acquire()
        try:
            moved = show_service.transition(db, other.show_id, ShowStatus.live, owner)
            assert moved.status == ShowStatus.live
        finally:
            lock.release()

    def test_lost_update_raises_conflict_and_rolls_back(self, db, session_factory, live_show):
        show_id, owner = live_show
        with pytest.raises(ConflictError):
            with show_transaction(db, show_id) as scope:
                scope.show.name = "Renamed"
                # another process bumps the version behind our back
                other = session_factory()
                other.query(Show).filter(Show.show_id == show_id).update({Show.version: Show.version + 1})
                other.commit()
                other.close()

        db.expire_all()
        assert db.query(Show).filter(Show.show_id == show_id).one().name == "Acoustic Night"

    def test_failed_operation_leaves_no_side_effects(self, db, live_show):
        show_id, owner = live_show
        req = queue_service.submit(db, show_id, requester_name="Ana", custom_title="S", custom_artist="A")
        with pytest.raises(Exception):
            queue_service.complete(db, req.request_id, owner)
        db.expire_all()
        fresh = queue_service.get_request(db, req.request_id)
        assert fresh.status == RequestStatus.pending
        assert fresh.position == 1

    def test_lock_registry_drops_unused_entries(self):
        locks = ShowLocks()
        held = locks.get("show-1")
        assert locks.get("show-1") is held
        del held
        assert "show-1" not in locks._locks

    def test_call_with_retry_retries_once(self):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise ConflictError("busy")
            return "ok"

        assert call_with_retry(flaky) == "ok"
        assert len(calls) == 2

    def test_call_with_retry_gives_up_after_second_failure(self):
        def always_times_out():
            raise PersistenceTimeoutError("slow")

        with pytest.raises(PersistenceTimeoutError):
            call_with_retry(always_times_out)


class TestNotifications:

    def test_events_published_after_commit(self, db, live_show):
        show_id, owner = live_show
        received: list[ChangeEvent] = []
        notifier.subscribe(show_id, received.append)
        try:
            req = queue_service.submit(db, show_id, requester_name="Ana", custom_title="S", custom_artist="A")
            queue_service.accept(db, req.request_id, owner)
            show_service.transition(db, show_id, ShowStatus.paused, owner)
        finally:
            notifier.unsubscribe(show_id, received.append)

        assert [e.to_dict() for e in received] == [
            {"entity": "song_request", "id": req.request_id, "show_id": show_id, "new_state": "pending"},
            {"entity": "song_request", "id": req.request_id, "show_id": show_id, "new_state": "accepted"},
            {"entity": "show", "id": show_id, "show_id": show_id, "new_state": "paused"},
        ]

    def test_rolled_back_operation_publishes_nothing(self, db, live_show):
        show_id, owner = live_show
        received = []
        notifier.subscribe(show_id, received.append)
        try:
            with pytest.raises(Exception):
                show_service.transition(db, show_id, ShowStatus.draft, owner)
        finally:
            notifier.unsubscribe(show_id, received.append)
        assert received == []

    def test_failing_subscriber_does_not_break_others(self):
        broker = ChangeNotifier()
        received = []

        def broken(event):
            raise RuntimeError("socket closed")

        broker.subscribe("show-1", broken)
        broker.subscribe("show-1", received.append)
        event = ChangeEvent(entity="show", id="show-1", show_id="show-1", new_state="live")
        broker.publish(event)
        assert received == [event]

    def test_subscribers_only_get_their_show(self):
        broker = ChangeNotifier()
        received = []
        broker.subscribe("show-1", received.append)
        broker.publish(ChangeEvent(entity="show", id="show-2", show_id="show-2", new_state="live"))
        assert received == []
