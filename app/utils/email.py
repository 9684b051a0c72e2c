import logging
from typing import List, Dict, Any

from ..config import get_settings

logger = logging.getLogger(__name__)


class EmailService:
    """Outgoing e-mail notifications. Delivery is logged, not sent."""

    def __init__(self):
        settings = get_settings()
        self.sender = settings.EMAIL_FROM
        self.sent_emails: List[Dict[str, Any]] = []

    def send_email(self, to_email: str, subject: str, body: str) -> bool:
        """Record and log an outgoing e-mail"""
        self.sent_emails.append(
            {"from": self.sender, "to": to_email, "subject": subject, "body": body}
        )
        logger.info(f"EMAIL from={self.sender} to={to_email} subject={subject!r}")
        return True

    def send_invitation_email(
        self, to_email: str, unit_name: str, inviter_name: str, role: str
    ) -> bool:
        """Notify a user that they were invited to a unit"""
        if not to_email:
            logger.info(f"Skipping invitation e-mail for {unit_name}: no address")
            return False

        subject = f"You're invited to join {unit_name} on HomeTeam"
        body = (
            f"{inviter_name} invited you to join '{unit_name}' as {role}. "
            "Open HomeTeam to accept or decline the invitation."
        )
        return self.send_email(to_email, subject, body)
