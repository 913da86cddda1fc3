"""
Operator notifications by e-mail.

Low-paper and ink alerts go to the kiosk administrator. Delivery is
fire-and-forget: a print request never waits on (or fails because of) the
mail server. Each message is sent from its own short-lived thread and
delivery failures are logged.
"""

from __future__ import annotations

import smtplib
import threading
from email.message import EmailMessage
from typing import Optional

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class MailNotifier:
    """
    Sends plain-text notifications through SMTP.

    Port 465 uses implicit TLS; any other port upgrades with STARTTLS when
    the server offers it.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        recipient: str,
        subject: str = "PRINTU KIOSK NOTIFY",
        username: str = "",
        password: str = "",
        background: bool = True,
    ):
        self._host = host
        self._port = port
        self._sender = sender
        self._recipient = recipient
        self._subject = subject
        self._username = username
        self._password = password
        self._background = background

    @classmethod
    def from_config(cls, config) -> "MailNotifier":
        """Build from a Flask config mapping (see config.Config)."""
        return cls(
            host=config.get("SMTP_SERVER", ""),
            port=int(config.get("SMTP_PORT", 587)),
            sender=config.get("NOTIFY_FROM", ""),
            recipient=config.get("ADMIN_EMAIL", ""),
            subject=config.get("NOTIFY_SUBJECT", "PRINTU KIOSK NOTIFY"),
            username=config.get("SMTP_USER", ""),
            password=config.get("SMTP_PASS", ""),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._host and self._sender and self._recipient)

    def notify(self, text: str) -> Optional[threading.Thread]:
        """
        Queue a notification.

        Returns:
            The delivery thread when sending in the background, else None
        """
        if not self.is_configured:
            logger.warning(f"SMTP not configured, notification dropped: {text}")
            return None

        logger.info(f"Notifying {self._recipient}: {text}")

        if not self._background:
            self._deliver(text)
            return None

        thread = threading.Thread(
            target=self._deliver,
            args=(text,),
            name="Notify",
            daemon=True,
        )
        thread.start()
        return thread

    def _build_message(self, text: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = self._recipient
        message["Subject"] = self._subject
        message.set_content(text)
        return message

    def _deliver(self, text: str) -> None:
        message = self._build_message(text)
        try:
            if self._port == 465:
                smtp = smtplib.SMTP_SSL(self._host, self._port, timeout=30)
            else:
                smtp = smtplib.SMTP(self._host, self._port, timeout=30)

            with smtp:
                if self._port != 465:
                    smtp.ehlo()
                    if smtp.has_extn("starttls"):
                        smtp.starttls()
                        smtp.ehlo()
                if self._username:
                    smtp.login(self._username, self._password)
                smtp.send_message(message)

            logger.debug(f"Notification delivered to {self._recipient}")

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Notification delivery failed: {e}")
