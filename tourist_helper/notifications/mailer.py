import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from tourist_helper.config import settings

logger = logging.getLogger(__name__)


class Mailer:
    """Sends HTML mail over SMTP. Delivery failures are logged, never raised."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_name: str,
        use_tls: bool = True,
        enabled: bool = True,
        timeout: int = 20,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_name = from_name
        self.use_tls = use_tls
        self.enabled = enabled
        self.timeout = timeout

    def build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self.from_name, self.username))
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, to: Optional[str], subject: str, html: str) -> bool:
        if not to:
            return False
        if not self.enabled:
            logger.info("Email disabled, skipped %r to %s", subject, to)
            return False

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(self.build_message(to, subject, html))
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email sending failed to %s: %s", to, e)
            return False

        logger.info("Email sent to %s: %s", to, subject)
        return True


def get_mailer() -> Mailer:
    return Mailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.EMAIL_USER,
        password=settings.EMAIL_PASS,
        from_name=settings.EMAIL_FROM_NAME,
        use_tls=settings.SMTP_USE_TLS,
        enabled=settings.EMAIL_ENABLED,
    )
