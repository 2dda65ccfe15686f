"""Email channel port — abstract interface for email dispatch."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters.

    Adapters report delivery problems through the returned status instead of
    raising, so callers can treat sending as best-effort.
    """

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        """Send an email message.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

    def close(self) -> None:  # noqa: B027
        """Release any connection held by the adapter."""
