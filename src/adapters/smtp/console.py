"""
Console email sender - development stand-in for SMTP delivery.

Writes every notification to the application log instead of a mailbox, so
a developer can read the verification code off the server output.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    EmailSender that logs instead of delivering.

    Selected when ``email_backend`` is anything other than ``smtp``. Never
    fails, so registration and login always report the code as sent.
    """

    def send_verification_code(self, email: str, name: str, code: str) -> None:
        """
        Log the verification code for an account.

        Args:
            email: Normalized recipient address
            name: Display name used in the greeting
            code: Plain-text one-time code (only ever logged here)
        """
        logger.info("[VERIFICATION] Email: %s Name: %s Code: %s", email, name, code)

    def send_welcome(self, email: str, name: str) -> None:
        logger.info("[WELCOME] Email: %s Name: %s", email, name)
