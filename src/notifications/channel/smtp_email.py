"""SMTP email adapter — delivers through a relay with STARTTLS or implicit TLS.

Port 465 uses implicit TLS; any other port upgrades with STARTTLS. One
authenticated connection is opened on first use and reused for later
messages; it is checked with NOOP before each send and reopened when the
relay has dropped it. ``close()`` ends the session with QUIT.
"""

import smtplib
import threading
from email.message import EmailMessage
from email.utils import make_msgid

import structlog

from notifications.channel.email_port import EmailPort

logger = structlog.get_logger(__name__)


class SmtpEmailAdapter(EmailPort):
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        from_address: str = "no-reply@storefront.local",
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.timeout = timeout
        self._connection: smtplib.SMTP | None = None
        # smtplib connections are not safe to share between threads
        self._lock = threading.Lock()

    def _connect(self) -> smtplib.SMTP:
        if self.port == 465:
            client = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            client = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
            client.starttls()
        if self.username and self.password:
            client.login(self.username, self.password)
        logger.debug("SMTP connection opened", host=self.host, port=self.port)
        return client

    def _client(self) -> smtplib.SMTP:
        if self._connection is not None:
            try:
                self._connection.noop()
            except (smtplib.SMTPException, OSError):
                logger.info("SMTP connection lost, reconnecting", host=self.host)
                self._discard()
        if self._connection is None:
            self._connection = self._connect()
        return self._connection

    def _discard(self) -> None:
        connection, self._connection = self._connection, None
        if connection is not None:
            connection.close()

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")

        with self._lock:
            try:
                self._client().send_message(message)
            except (smtplib.SMTPException, OSError) as exc:
                self._discard()
                logger.error("SMTP send failed", to=to, subject=subject, error=str(exc))
                return {"message_id": None, "status": "failed", "error": str(exc)}

        return {"message_id": message["Message-ID"], "status": "sent"}

    def close(self) -> None:
        with self._lock:
            connection, self._connection = self._connection, None
            if connection is None:
                return
            try:
                connection.quit()
            except (smtplib.SMTPException, OSError) as exc:
                logger.warning("SMTP quit failed", host=self.host, error=str(exc))
                connection.close()
