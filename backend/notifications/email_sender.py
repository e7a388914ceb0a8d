"""
Email sending via Resend API for notification system.

Delivers rendered digest bodies to subscribers; the recipient address is
resolved through the subscriber directory.
"""

import logging
import os
from typing import Any, Dict, Optional

import resend

from models.types import UserID
from notifications.digest_renderer import DIGEST_SUBJECT
from notifications.subscriber_directory import SubscriberDirectory
from shared.config import get_from_email
from shared.errors import SendFailureError

logger = logging.getLogger(__name__)

# Initialize Resend with API key from environment
resend.api_key = os.getenv("RESEND_API_KEY")


class EmailSender:
    """Mail collaborator: sends one HTML digest to one user."""

    def __init__(
        self,
        directory: SubscriberDirectory,
        subject: str = DIGEST_SUBJECT,
        from_email: Optional[str] = None,
    ):
        self.directory = directory
        self.subject = subject
        self.from_email = from_email or get_from_email()

    def send(self, user_id: UserID, html_body: str) -> Dict[str, Any]:
        """
        Send a digest email to a user.

        Args:
            user_id: Recipient user
            html_body: Rendered HTML digest

        Returns:
            Dictionary with 'email_id' from Resend

        Raises:
            SendFailureError: If the user has no address or Resend rejects the email
        """
        user_email = self.directory.get_email(user_id)
        if not user_email:
            raise SendFailureError(user_id, "no email address on file")

        try:
            response = resend.Emails.send(
                {
                    "from": f"MSCR Notifications <{self.from_email}>",
                    "to": user_email,
                    "subject": self.subject,
                    "html": html_body,
                }
            )
        except Exception as e:
            raise SendFailureError(user_id, str(e)) from e

        email_id = response.get("id") if isinstance(response, dict) else None
        logger.info("Sent digest to user %s (email id %s)", user_id, email_id)
        return {"email_id": email_id}
