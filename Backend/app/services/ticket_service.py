# app/services/ticket_service.py
from app.models.ticket import Ticket
from app.models.profile import Profile


class TicketService:
    """Read-only view of data owned by the ticketing and account services"""

    @staticmethod
    def has_active_ticket(user_id, event_id):
        ticket = Ticket.query.filter_by(
            user_id=user_id,
            event_id=event_id,
            status='active'
        ).first()
        return ticket is not None

    @staticmethod
    def is_admin(user_id):
        profile = Profile.query.filter_by(id=user_id).first()
        return bool(profile and profile.is_admin)
