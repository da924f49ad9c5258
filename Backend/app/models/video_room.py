from app.models import db
from .base import Base
from app.utils.time_sync import utc_now
import uuid


class VideoRoom(Base):
    __tablename__ = "video_rooms"
    __table_args__ = (
        db.CheckConstraint("status IN ('active', 'closed')", name="video_rooms_status_check"),
    )

    id = db.Column(
        db.String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )

    event_id = db.Column(db.String(36), nullable=False, index=True)

    # externally visible name, same value as id
    room_name = db.Column(db.Text, nullable=False, unique=True)

    status = db.Column(db.Text, nullable=False, default="active", index=True)

    created_at = db.Column(db.DateTime, default=utc_now)
    closed_at = db.Column(db.DateTime)

    # filled in after the provider call succeeds
    daily_url = db.Column(db.Text)
