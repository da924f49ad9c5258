# app/services/queue_service.py
"""
Queue Store - one matchmaking_queue row per (event, user)

Every operation here is a single-row statement and safe to run concurrently.
mark_matched is the exception: it belongs inside the pairing transaction.
"""
from sqlalchemy.dialects import postgresql, sqlite

from app.models import db
from app.models.queue_entry import QueueEntry
from app.utils.time_sync import utc_now


_UPSERT_DIALECTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


class QueueService:

    @staticmethod
    def upsert_waiting(event_id, user_id):
        """Insert the entry or reset it to waiting with a fresh joined_queue_at"""
        now = utc_now()
        dialect = db.session.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise RuntimeError(f'Unsupported database dialect: {dialect}')

        stmt = insert(QueueEntry.__table__).values(
            event_id=event_id,
            user_id=user_id,
            is_matched=False,
            current_room_id=None,
            joined_queue_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=['event_id', 'user_id'],
            set_={
                'is_matched': False,
                'current_room_id': None,
                'joined_queue_at': now,
            }
        )
        db.session.execute(stmt)
        db.session.commit()

    @staticmethod
    def reset_waiting(event_id, user_id):
        """
        Put an existing entry back to waiting with a fresh joined_queue_at.
        Never creates a row.

        Returns:
            int: number of entries reset (0 means not in queue)
        """
        updated = QueueEntry.query.filter_by(
            event_id=event_id,
            user_id=user_id
        ).update(
            {'is_matched': False, 'current_room_id': None, 'joined_queue_at': utc_now()},
            synchronize_session=False
        )
        db.session.commit()
        return updated

    @staticmethod
    def remove(event_id, user_id):
        """Delete the entry; a missing entry is not an error"""
        deleted = QueueEntry.query.filter_by(
            event_id=event_id,
            user_id=user_id
        ).delete(synchronize_session=False)
        db.session.commit()
        return deleted

    @staticmethod
    def mark_matched(event_id, user_ids, room_id):
        """
        Flag exactly the two entries as matched into room_id.

        Does not commit. Only call from inside the pairing transaction while the
        event lock is held.
        """
        updated = QueueEntry.query.filter(
            QueueEntry.event_id == event_id,
            QueueEntry.user_id.in_(list(user_ids))
        ).update(
            {'is_matched': True, 'current_room_id': room_id},
            synchronize_session=False
        )
        if updated != 2:
            raise RuntimeError(f'Expected 2 queue entries to match, updated {updated}')
        return updated

    @staticmethod
    def get_status(event_id, user_id):
        """
        Returns:
            QueueEntry | None: None means not in queue
        """
        return QueueEntry.query.filter_by(
            event_id=event_id,
            user_id=user_id
        ).first()

    @staticmethod
    def count_waiting(event_id):
        return QueueEntry.query.filter_by(
            event_id=event_id,
            is_matched=False
        ).count()
