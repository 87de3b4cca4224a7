"""
Best-effort email delivery for complaint notifications.

notify() queues the send on a small thread pool and returns at once, so a
slow or failing gateway never lengthens or fails the lifecycle operation
that triggered it. Delivery errors are logged here and go no further.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from clients.email_client import EmailGatewayClient, EmailGatewayError

logger = logging.getLogger(__name__)


class Notifier:
    """Fire-and-forget email sender."""

    def __init__(self, email_client: EmailGatewayClient, max_workers: int = 4, sender: str = "system"):
        self.email_client = email_client
        self.sender = sender
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="complaint-notify",
        )

    def notify(self, to: str | None, subject: str, body: str) -> Future | None:
        """
        Queue one email.

        Args:
            to: Recipient address; blank recipients are skipped
            subject: Subject line
            body: Plain text body

        Returns:
            Future resolving to True if the gateway accepted the email, False
            otherwise. None if nothing was queued.
        """
        if not to or not to.strip():
            logger.warning(f"Skipping notification with no recipient: {subject}")
            return None

        try:
            return self._executor.submit(self._deliver, to, subject, body)
        except RuntimeError as e:
            # Executor already shut down
            logger.error(f"Notification to {to} not queued: {e}")
            return None

    def _deliver(self, to: str, subject: str, body: str) -> bool:
        try:
            self.email_client.send_email(to=to, subject=subject, body=body, sender=self.sender)
        except (EmailGatewayError, ValueError) as e:
            logger.error(f"Failed to send notification to {to} ({subject}): {e}")
            return False
        except Exception:
            logger.exception(f"Unexpected error sending notification to {to} ({subject})")
            return False
        return True

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting notifications; optionally wait for queued sends."""
        self._executor.shutdown(wait=wait)
