# app/services/pairing_service.py
"""
Pairing Engine - forms at most one pair per call for an event

One transaction:
    event lock → oldest waiting user → next oldest waiting user
    → VideoRoom → both entries matched → MatchHistory → COMMIT

Anything that fails before COMMIT rolls everything back; no user is ever
visible as matched without its room.
"""
from app.models import db
from app.models.queue_entry import QueueEntry
from app.models.video_room import VideoRoom
from app.models.match_history import MatchHistory
from app.services.queue_service import QueueService
from app.utils.event_lock import event_lock
import logging
import uuid

logger = logging.getLogger(__name__)

NOT_ENOUGH_USERS = 'Not enough users in queue'


class PairingService:

    @staticmethod
    def _oldest_waiting(event_id, exclude_user_id=None):
        query = QueueEntry.query.filter(
            QueueEntry.event_id == event_id,
            QueueEntry.is_matched.is_(False)
        )
        if exclude_user_id is not None:
            query = query.filter(QueueEntry.user_id != exclude_user_id)

        return (
            query
            .order_by(QueueEntry.joined_queue_at.asc(), QueueEntry.id.asc())
            .with_for_update(skip_locked=True)
            .first()
        )

    @staticmethod
    def pair(event_id):
        """
        Match the two longest-waiting users of an event

        Returns:
            dict: {
                'success': bool,
                'room_id': str,
                'user1_id': str,
                'user2_id': str,
                'error': str (if failed),
                'code': 500 (store failure only)
            }
        """
        # the lock has to be taken before this unit of work reads anything
        db.session.commit()

        try:
            with event_lock(db.session, event_id):
                first = PairingService._oldest_waiting(event_id)
                if first is None:
                    db.session.rollback()
                    return {'success': False, 'error': NOT_ENOUGH_USERS}

                second = PairingService._oldest_waiting(event_id, exclude_user_id=first.user_id)
                if second is None:
                    db.session.rollback()
                    return {'success': False, 'error': NOT_ENOUGH_USERS}

                user1_id, user2_id = first.user_id, second.user_id
                room_id = str(uuid.uuid4())

                db.session.add(VideoRoom(
                    id=room_id,
                    room_name=room_id,
                    event_id=event_id,
                    status='active'
                ))
                db.session.flush()

                QueueService.mark_matched(event_id, [user1_id, user2_id], room_id)

                low, high = sorted([user1_id, user2_id])
                db.session.add(MatchHistory(
                    event_id=event_id,
                    user1_id=low,
                    user2_id=high,
                    room_id=room_id
                ))

                db.session.commit()

        except Exception as e:
            db.session.rollback()
            logger.exception(f"[Pairing] Failed for event {event_id}")
            return {'success': False, 'error': str(e), 'code': 500}

        logger.info(f"[Pairing] event={event_id} room={room_id} users={user1_id},{user2_id}")
        return {
            'success': True,
            'room_id': room_id,
            'user1_id': user1_id,
            'user2_id': user2_id,
        }
