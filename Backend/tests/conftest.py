import threading
import uuid

import pytest

from app.main import create_app
from app.models import db, Profile, Ticket
from app.services.room_provider import RoomProvisioningError


class FakeRoomProvider:
    """Stands in for DailyRoomProvider; flip `fail` to simulate an outage"""

    def __init__(self):
        self.fail = False
        self.calls = []
        self._lock = threading.Lock()

    def create_room(self, room_name):
        with self._lock:
            self.calls.append(room_name)
        if self.fail:
            raise RoomProvisioningError("provider down")
        return f"https://visually-speaking.daily.co/{room_name}"


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'matchmaking.db'}",
        "DAILY_API_KEY": "",
        "LOG_LEVEL": "WARNING",
    })
    app.extensions["room_provider"] = FakeRoomProvider()

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def provider(app):
    return app.extensions["room_provider"]


@pytest.fixture
def event_id():
    return str(uuid.uuid4())


@pytest.fixture
def make_user(app):
    """Create a user id, optionally holding a ticket for an event / admin rights"""
    def _make_user(event_id=None, ticket_status="active", admin=False):
        user_id = str(uuid.uuid4())
        with app.app_context():
            if admin:
                db.session.add(Profile(id=user_id, email=f"{user_id}@example.com", is_admin=True))
            if event_id and ticket_status:
                db.session.add(Ticket(event_id=event_id, user_id=user_id, status=ticket_status))
            db.session.commit()
        return user_id
    return _make_user


@pytest.fixture
def auth():
    """Headers the auth gateway would forward for a verified user"""
    def _auth(user_id):
        return {"X-User-ID": user_id}
    return _auth
