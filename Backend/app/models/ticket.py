from app.models import db
from .base import Base
from sqlalchemy.sql import func
import uuid


class Ticket(Base):
    __tablename__ = "tickets"

    id = db.Column(
        db.String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )

    event_id = db.Column(db.String(36), nullable=False, index=True)
    user_id = db.Column(db.String(36), nullable=False, index=True)

    # active | refunded | cancelled
    status = db.Column(db.Text)

    created_at = db.Column(db.DateTime, server_default=func.now())
