# app/services/matchmaking_service.py
from app.models import db
from app.models.video_room import VideoRoom
from app.services.queue_service import QueueService
from app.services.pairing_service import PairingService
from app.services.ticket_service import TicketService
from app.services.video_room_service import VideoRoomService
import logging

logger = logging.getLogger(__name__)


class MatchmakingService:
    """
    Queue operations driven by the web client.

    Inputs are already validated (UUID event/user ids) by the route layer.
    """

    @staticmethod
    def _pair_and_provision(event_id):
        """One pairing attempt followed by one provisioning attempt on success"""
        result = PairingService.pair(event_id)
        if result.get('success'):
            result['daily_url'] = VideoRoomService.provision(result['room_id'])
        return result

    @staticmethod
    def _pair_for(event_id, user_id):
        """Pairing attempt on behalf of a caller who is already waiting"""
        result = MatchmakingService._pair_and_provision(event_id)
        if not result.get('success'):
            if result.get('code'):
                # user is validly queued; pairing is retried by the next join
                logger.warning(f"[Matchmaking] Pairing error, {user_id} keeps waiting: {result['error']}")
            return {'success': True, 'status': 'waiting', 'matched': False}

        # the pair formed may not include the caller
        entry = QueueService.get_status(event_id, user_id)
        if entry is None or not entry.is_matched:
            return {'success': True, 'status': 'waiting', 'matched': False}

        room_id = entry.current_room_id
        if room_id == result['room_id']:
            daily_url = result['daily_url']
        else:
            # paired by a concurrent request
            room = db.session.get(VideoRoom, room_id)
            daily_url = room.daily_url if room else None
        return {
            'success': True,
            'status': 'matched',
            'matched': True,
            'room_id': room_id,
            'daily_url': daily_url,
        }

    @staticmethod
    def join(event_id, user_id):
        """
        Join the event queue (ticket required) and try to pair immediately

        Returns:
            dict: {
                'success': bool,
                'status': 'matched' | 'waiting',
                'matched': bool,
                'room_id': str (if matched),
                'daily_url': str | None (if matched),
                'error': str (if failed),
                'code': int (if failed)
            }
        """
        try:
            if not TicketService.has_active_ticket(user_id, event_id):
                db.session.rollback()
                return {'success': False, 'error': 'You need a ticket to join this event', 'code': 400}

            logger.info(f"[Matchmaking] join event={event_id} user={user_id}")
            QueueService.upsert_waiting(event_id, user_id)
            return MatchmakingService._pair_for(event_id, user_id)

        except Exception as e:
            db.session.rollback()
            logger.exception("[Matchmaking] join failed")
            return {'success': False, 'error': str(e), 'code': 500}

    @staticmethod
    def leave(event_id, user_id):
        """Idempotent: leaving when not queued still succeeds"""
        try:
            removed = QueueService.remove(event_id, user_id)
            logger.info(f"[Matchmaking] leave event={event_id} user={user_id} removed={removed}")
            return {'success': True}

        except Exception as e:
            db.session.rollback()
            logger.exception("[Matchmaking] leave failed")
            return {'success': False, 'error': str(e), 'code': 500}

    @staticmethod
    def status(event_id, user_id):
        """
        Returns:
            dict: {
                'success': bool,
                'status': 'not_in_queue' | 'waiting' | 'matched',
                'room_id': str (if matched),
                'daily_url': str (if matched and provisioned)
            }
        """
        try:
            entry = QueueService.get_status(event_id, user_id)
            if entry is None:
                return {'success': True, 'status': 'not_in_queue'}

            result = {'success': True, 'status': entry.state}
            if entry.is_matched and entry.current_room_id:
                result['room_id'] = entry.current_room_id
                room = db.session.get(VideoRoom, entry.current_room_id)
                if room and room.daily_url:
                    result['daily_url'] = room.daily_url

            return result

        except Exception as e:
            db.session.rollback()
            logger.exception("[Matchmaking] status failed")
            return {'success': False, 'error': str(e), 'code': 500}

    @staticmethod
    def next_match(event_id, user_id):
        """
        Put the caller back to waiting (dropping the previous room link) and
        try to pair again. The previous room is left as it is.

        Only an existing queue entry is reset; callers who never joined get
        a 400 and nothing is written.
        """
        try:
            logger.info(f"[Matchmaking] next-match event={event_id} user={user_id}")
            if QueueService.reset_waiting(event_id, user_id) == 0:
                return {'success': False, 'error': 'You are not in the queue for this event', 'code': 400}

            result = MatchmakingService._pair_for(event_id, user_id)
            result.pop('status', None)
            return result

        except Exception as e:
            db.session.rollback()
            logger.exception("[Matchmaking] next-match failed")
            return {'success': False, 'error': str(e), 'code': 500}

    @staticmethod
    def force_match(event_id):
        """
        Admin trigger: one pairing attempt, no queue writes

        Returns:
            dict: {
                'success': bool,
                'matched': bool,
                'room_id': str, 'daily_url': str | None,
                'users': [user1_id, user2_id]   (if matched)
                'error': str                    (if not matched)
                'code': 500                     (store failure only)
            }
        """
        logger.info(f"[Matchmaking] force-match event={event_id}")
        result = MatchmakingService._pair_and_provision(event_id)

        if not result.get('success'):
            failed = {'success': False, 'matched': False, 'error': result.get('error')}
            if result.get('code'):
                failed['code'] = result['code']
            else:
                logger.info(
                    f"[Matchmaking] force-match event={event_id} not matched, "
                    f"waiting={QueueService.count_waiting(event_id)}"
                )
            return failed

        return {
            'success': True,
            'matched': True,
            'room_id': result['room_id'],
            'daily_url': result['daily_url'],
            'users': [result['user1_id'], result['user2_id']],
        }
