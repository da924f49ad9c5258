from app.models import db
from .base import Base
from app.utils.time_sync import utc_now
import uuid


class MatchHistory(Base):
    """Append-only audit of formed pairs. user1_id < user2_id always."""
    __tablename__ = "match_history"
    __table_args__ = (
        db.CheckConstraint("user1_id < user2_id", name="match_history_check"),
    )

    id = db.Column(
        db.String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )

    event_id = db.Column(db.String(36), nullable=False, index=True)
    user1_id = db.Column(db.String(36), nullable=False, index=True)
    user2_id = db.Column(db.String(36), nullable=False, index=True)

    room_id = db.Column(
        db.String(36),
        db.ForeignKey("video_rooms.id", ondelete="SET NULL")
    )

    started_at = db.Column(db.DateTime, default=utc_now)
    ended_at = db.Column(db.DateTime)
    duration_seconds = db.Column(db.Integer)
