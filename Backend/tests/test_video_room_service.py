import uuid

from app.models import db, VideoRoom
from app.services.video_room_service import VideoRoomService


def _room(app, event_id):
    room_id = str(uuid.uuid4())
    with app.app_context():
        db.session.add(VideoRoom(id=room_id, room_name=room_id, event_id=event_id))
        db.session.commit()
    return room_id


def test_provision_stores_url(app, provider, event_id):
    room_id = _room(app, event_id)

    with app.app_context():
        url = VideoRoomService.provision(room_id)

        assert url == f"https://visually-speaking.daily.co/{room_id}"
        assert db.session.get(VideoRoom, room_id).daily_url == url


def test_provision_is_not_repeated_once_url_is_set(app, provider, event_id):
    room_id = _room(app, event_id)

    with app.app_context():
        VideoRoomService.provision(room_id)
        VideoRoomService.provision(room_id)

    assert provider.calls == [room_id]


def test_provision_failure_leaves_room_without_url(app, provider, event_id):
    provider.fail = True
    room_id = _room(app, event_id)

    with app.app_context():
        assert VideoRoomService.provision(room_id) is None
        room = db.session.get(VideoRoom, room_id)
        assert room is not None
        assert room.daily_url is None


def test_provision_unknown_room(app, provider):
    with app.app_context():
        assert VideoRoomService.provision(str(uuid.uuid4())) is None

    assert provider.calls == []
