"""Email channel construction.

The adapter is built once by the application factory from settings and
passed to whoever needs it, rather than looked up from a module-level
singleton. Tests construct their own ``FakeEmailAdapter``.
"""

from notifications.channel.console_email import ConsoleEmailAdapter
from notifications.channel.email_port import EmailPort
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.channel.smtp_email import SmtpEmailAdapter
from shared.config import Settings


def build_email_channel(settings: Settings) -> EmailPort:
    """Return the email adapter selected by ``settings.email_adapter``.

    ``smtp`` falls back to the console adapter when no host or credentials
    are configured, so a development setup never needs a mail server.
    """
    adapter = settings.email_adapter.lower()

    if adapter == "fake":
        return FakeEmailAdapter()
    if adapter == "console":
        return ConsoleEmailAdapter()
    if adapter == "smtp":
        if not (settings.smtp_host and settings.smtp_user and settings.smtp_password):
            return ConsoleEmailAdapter()
        return SmtpEmailAdapter(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            from_address=settings.smtp_from_address,
        )
    raise ValueError(f"Unknown email adapter: {settings.email_adapter}")
