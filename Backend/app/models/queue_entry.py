from app.models import db
from .base import Base
from app.utils.time_sync import utc_now


class QueueEntry(Base):
    __tablename__ = "matchmaking_queue"
    __table_args__ = (
        db.UniqueConstraint("event_id", "user_id", name="matchmaking_queue_event_id_user_id_key"),
    )

    id = db.Column(db.Integer, primary_key=True)

    event_id = db.Column(db.String(36), nullable=False, index=True)
    user_id = db.Column(db.String(36), nullable=False)

    joined_queue_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    is_matched = db.Column(db.Boolean, nullable=False, default=False, index=True)

    # set iff is_matched
    current_room_id = db.Column(
        db.String(36),
        db.ForeignKey("video_rooms.id", ondelete="SET NULL"),
        nullable=True
    )

    @property
    def state(self):
        return "matched" if self.is_matched else "waiting"
