"""Console email adapter — logs messages instead of delivering them.

Used in development when no SMTP server is configured.
"""

from uuid import uuid4

import structlog

from notifications.channel.email_port import EmailPort

logger = structlog.get_logger(__name__)


class ConsoleEmailAdapter(EmailPort):
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        message_id = f"console-{uuid4().hex[:12]}"
        logger.info(
            "Email (not delivered, no SMTP configured)",
            message_id=message_id,
            to=to,
            subject=subject,
            body=body,
        )
        return {"message_id": message_id, "status": "sent"}
