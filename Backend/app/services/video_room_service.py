# app/services/video_room_service.py
from flask import current_app
from app.models import db
from app.models.video_room import VideoRoom
from app.models.queue_entry import QueueEntry
from app.services.room_provider import RoomProvisioningError
import logging

logger = logging.getLogger(__name__)


class VideoRoomService:

    @staticmethod
    def provision(room_id):
        """
        Create the provider room for an already committed VideoRoom.

        Runs once, after the pair is committed. A failure leaves the pairing
        untouched and the room without a URL.

        Returns:
            str | None: daily_url
        """
        provider = current_app.extensions.get('room_provider')
        room = db.session.get(VideoRoom, room_id)
        if room is None:
            logger.warning(f"[Rooms] Provision skipped, room {room_id} not found")
            return None
        if room.daily_url:
            return room.daily_url

        try:
            url = provider.create_room(room.room_name)
        except RoomProvisioningError as e:
            logger.warning(f"[Rooms] Provisioning failed for {room_id}: {e}")
            return None

        try:
            room.daily_url = url
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception(f"[Rooms] Could not store URL for {room_id}")
            return None

        return url

    @staticmethod
    def get_room_for_user(room_id, user_id):
        """Room details, visible only to a user currently matched into it"""
        try:
            entry = QueueEntry.query.filter_by(
                user_id=user_id,
                is_matched=True,
                current_room_id=room_id
            ).first()
            if not entry:
                return {'success': False, 'error': 'Room not found', 'code': 404}

            room = db.session.get(VideoRoom, room_id)
            if not room:
                return {'success': False, 'error': 'Room not found', 'code': 404}

            return {'success': True, 'room': room.to_dict()}

        except Exception as e:
            db.session.rollback()
            logger.exception("[Rooms] Lookup failed")
            return {'success': False, 'error': str(e), 'code': 500}
