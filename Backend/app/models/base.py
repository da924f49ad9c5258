from datetime import datetime

from app.models import db

class Base(db.Model):
    __abstract__ = True

    def to_dict(self):
        data = {}
        for c in self.__table__.columns:
            value = getattr(self, c.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[c.name] = value
        return data
