import threading
import uuid
from collections import Counter

import pytest

from app.models import db, QueueEntry, VideoRoom, MatchHistory
from app.services.pairing_service import PairingService, NOT_ENOUGH_USERS
from app.services.queue_service import QueueService


def _queue(app, event_id, count):
    users = [str(uuid.uuid4()) for _ in range(count)]
    with app.app_context():
        for user in users:
            QueueService.upsert_waiting(event_id, user)
    return users


def test_pair_selects_two_distinct_waiting_users(app, event_id):
    users = _queue(app, event_id, 2)

    with app.app_context():
        result = PairingService.pair(event_id)

        assert result["success"] is True
        assert result["user1_id"] != result["user2_id"]
        assert {result["user1_id"], result["user2_id"]} == set(users)

        room = db.session.get(VideoRoom, result["room_id"])
        assert room.room_name == result["room_id"]
        assert room.event_id == event_id
        assert room.daily_url is None

        entries = QueueEntry.query.filter_by(event_id=event_id).all()
        assert all(e.is_matched for e in entries)
        assert {e.current_room_id for e in entries} == {result["room_id"]}


def test_single_waiting_user_is_never_paired_with_itself(app, event_id):
    (alice,) = _queue(app, event_id, 1)

    with app.app_context():
        result = PairingService.pair(event_id)

        assert result == {"success": False, "error": NOT_ENOUGH_USERS}
        entry = QueueService.get_status(event_id, alice)
        assert entry.is_matched is False
        assert entry.current_room_id is None


def test_matched_users_are_not_selected_again(app, event_id):
    _queue(app, event_id, 3)

    with app.app_context():
        assert PairingService.pair(event_id)["success"] is True
        assert PairingService.pair(event_id) == {"success": False, "error": NOT_ENOUGH_USERS}
        assert QueueService.count_waiting(event_id) == 1


def test_events_do_not_share_queues(app):
    event_a, event_b = str(uuid.uuid4()), str(uuid.uuid4())
    _queue(app, event_a, 1)
    _queue(app, event_b, 1)

    with app.app_context():
        assert PairingService.pair(event_a)["success"] is False
        assert PairingService.pair(event_b)["success"] is False


def test_failure_inside_transaction_rolls_back_everything(app, event_id, monkeypatch):
    _queue(app, event_id, 2)

    def broken_mark_matched(*args, **kwargs):
        raise RuntimeError("store went away")

    monkeypatch.setattr(QueueService, "mark_matched", staticmethod(broken_mark_matched))

    with app.app_context():
        result = PairingService.pair(event_id)

        assert result["success"] is False
        assert result["code"] == 500
        assert VideoRoom.query.count() == 0
        assert MatchHistory.query.count() == 0
        assert QueueService.count_waiting(event_id) == 2


def test_mark_matched_requires_both_entries(app, event_id):
    (alice,) = _queue(app, event_id, 1)

    with app.app_context():
        with pytest.raises(RuntimeError):
            QueueService.mark_matched(event_id, [alice, str(uuid.uuid4())], str(uuid.uuid4()))
        db.session.rollback()


def test_concurrent_pair_calls_form_disjoint_pairs(app, event_id):
    users = _queue(app, event_id, 20)
    results = []
    results_lock = threading.Lock()
    start = threading.Barrier(20)

    def worker():
        start.wait()
        with app.app_context():
            result = PairingService.pair(event_id)
        with results_lock:
            results.append(result)

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    paired = [r for r in results if r["success"]]
    assert len(paired) == 10
    assert all(r["error"] == NOT_ENOUGH_USERS for r in results if not r["success"])

    seen = Counter()
    for r in paired:
        assert r["user1_id"] != r["user2_id"]
        seen.update([r["user1_id"], r["user2_id"]])
    assert set(seen) == set(users)
    assert max(seen.values()) == 1

    with app.app_context():
        assert VideoRoom.query.count() == 10
        assert MatchHistory.query.count() == 10
        per_room = Counter(e.current_room_id for e in QueueEntry.query.all())
        assert set(per_room.values()) == {2}
