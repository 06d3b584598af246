import asyncio
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Optional

from core.config import SmtpConfig
from core.exceptions import ConfigurationError, NotificationDeliveryFailure
from core.logger import setup_logger

logger = setup_logger("MAILER")


@dataclass
class SendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class SmtpMailer:
    """Sends HTML email over SMTP. The blocking smtplib call runs in a worker thread."""

    def __init__(self, config: SmtpConfig):
        self.config = config

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self.config.from_name, self.config.username))
        msg["To"] = to
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid()
        msg.set_content("This message needs an HTML capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def _send_sync(self, msg: EmailMessage):
        cfg = self.config
        if cfg.use_ssl:
            with smtplib.SMTP_SSL(cfg.host, cfg.port, timeout=cfg.timeout) as smtp:
                smtp.login(cfg.username, cfg.password)
                smtp.send_message(msg)
        else:
            with smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout) as smtp:
                smtp.starttls()
                smtp.login(cfg.username, cfg.password)
                smtp.send_message(msg)

    async def deliver(self, to: str, subject: str, html: str) -> str:
        """Sends one message and returns its Message-ID, raising on failure."""
        if not self.config.username or not self.config.password:
            raise ConfigurationError("SMTP credentials not configured")

        msg = self._build_message(to, subject, html)
        try:
            await asyncio.to_thread(self._send_sync, msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationDeliveryFailure(to, e) from e

        logger.info(f"Email sent to {to}: {msg['Message-ID']}")
        return msg["Message-ID"]

    async def send(self, to: str, subject: str, html: str) -> SendResult:
        """Never raises; failures come back as SendResult(success=False)."""
        try:
            message_id = await self.deliver(to, subject, html)
        except ConfigurationError as e:
            logger.error(f"Email not sent to {to}: {e}")
            return SendResult(success=False, error=str(e))
        except NotificationDeliveryFailure as e:
            logger.error(f"Email send error: {e}")
            return SendResult(success=False, error=str(e.cause))
        return SendResult(success=True, message_id=message_id)
