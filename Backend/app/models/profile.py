from app.models import db
from .base import Base
from sqlalchemy.sql import func


class Profile(Base):
    """Owned by the account service; matchmaking only reads the admin flag."""
    __tablename__ = "profiles"

    id = db.Column(db.String(36), primary_key=True)
    email = db.Column(db.Text, nullable=False)
    display_name = db.Column(db.Text)
    is_admin = db.Column(db.Boolean, default=False)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())
