"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers the verification and welcome emails over SMTP with STARTTLS.
Transport errors are raised as the domain's NotificationFailed; whether
that fails the request is the domain service's decision.
"""

import logging
import smtplib
from email.mime.text import MIMEText

from src.adapters.smtp import templates
from src.domain.exceptions import NotificationFailed

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Implements EmailSender protocol over an SMTP relay."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        from_addr: str,
        user: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        code_valid_minutes: int = 10,
        frontend_url: str = "",
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._from_addr = from_addr
        self._user = user
        self._password = password
        self._use_tls = use_tls
        self._code_valid_minutes = code_valid_minutes
        self._frontend_url = frontend_url
        self._timeout = timeout

    def send_verification_code(self, email: str, name: str, code: str) -> None:
        html = templates.verification_email(name, code, self._code_valid_minutes)
        self.send_email(email, templates.VERIFICATION_SUBJECT, html)

    def send_welcome(self, email: str, name: str) -> None:
        html = templates.welcome_email(name, self._frontend_url)
        self.send_email(email, templates.WELCOME_SUBJECT, html)

    def send_email(self, to_addr: str, subject: str, html: str) -> None:
        """
        Send one HTML email.

        Raises:
            NotificationFailed: On any SMTP or connection error
        """
        msg = MIMEText(html, "html", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self._from_addr
        msg["To"] = to_addr

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._user and self._password:
                    server.login(self._user, self._password)
                server.sendmail(self._from_addr, [to_addr], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP send to %s failed: %s", to_addr, exc)
            raise NotificationFailed(str(exc)) from exc

        logger.info("Email sent successfully to %s", to_addr)
