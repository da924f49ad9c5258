from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event

db = SQLAlchemy()

from .base import Base
from .profile import Profile
from .ticket import Ticket
from .video_room import VideoRoom
from .queue_entry import QueueEntry
from .match_history import MatchHistory


def init_engine(app):
    """SQLite needs every transaction to take the write lock up front,
    otherwise two readers upgrading to writers deadlock each other."""
    with app.app_context():
        engine = db.engine
        if engine.dialect.name != "sqlite":
            return

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
