"""
Support Desk - user tickets and administrator replies.
"""

from typing import List

from appvault.engines.notifications.notifier import Notifier
from appvault.kernel.errors import NotFound, ValidationFailed
from appvault.logging_config import get_logger
from appvault.schemas.common import utcnow
from appvault.schemas.notification import NotificationType
from appvault.schemas.state import VaultState
from appvault.schemas.support import SupportTicket, TicketStatus
from appvault.schemas.user import User

logger = get_logger(__name__)


class SupportDesk:
    """Ticket lifecycle: open on submission, closed by an administrator."""

    def __init__(self, state: VaultState):
        self.state = state

    def submit(self, user: User, subject: str, message: str) -> SupportTicket:
        subject = (subject or "").strip()
        message = (message or "").strip()
        if not subject:
            raise ValidationFailed("Subject is required", field="subject")
        if not message:
            raise ValidationFailed("Message is required", field="message")

        ticket = SupportTicket(user_id=user.id, subject=subject, message=message)
        self.state.support_tickets.append(ticket)
        logger.info("Support ticket opened", extra={"ticket_id": ticket.id, "user_id": user.id})
        return ticket

    def reply(self, ticket_id: str, reply: str, close: bool = True) -> SupportTicket:
        reply = (reply or "").strip()
        if not reply:
            raise ValidationFailed("Reply is required", field="reply")

        ticket = self._require(ticket_id)
        ticket.admin_reply = reply
        ticket.replied_at = utcnow()
        if close:
            ticket.status = TicketStatus.CLOSED

        Notifier(self.state).notify(
            ticket.user_id,
            f"Support: {ticket.subject}",
            reply,
            NotificationType.INFO,
        )
        return ticket

    def close(self, ticket_id: str) -> SupportTicket:
        ticket = self._require(ticket_id)
        ticket.status = TicketStatus.CLOSED
        return ticket

    def tickets_for(self, user_id: str) -> List[SupportTicket]:
        return [t for t in self.state.support_tickets if t.user_id == user_id]

    def open_tickets(self) -> List[SupportTicket]:
        return [t for t in self.state.support_tickets if t.status == TicketStatus.OPEN]

    def _require(self, ticket_id: str) -> SupportTicket:
        for t in self.state.support_tickets:
            if t.id == ticket_id:
                return t
        raise NotFound(f"Support ticket {ticket_id} not found", field="ticket_id")
