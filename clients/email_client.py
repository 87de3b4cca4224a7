"""
Client for the HTTP email gateway that delivers complaint notifications.

Each send is one JSON POST. The gateway authenticates it with the X-API-Key
header and an X-Signature header holding the hex HMAC-SHA256 of the exact
body bytes, so the payload is serialized once and signed as sent.
"""

import hashlib
import hmac
import json
import logging

import requests

logger = logging.getLogger(__name__)

VALID_SENDERS = ("auth", "system")


class EmailGatewayError(Exception):
    """The gateway could not be reached or refused the message."""


class EmailGatewayClient:
    """Sends plain-text emails through the gateway."""

    def __init__(self, gateway_url: str, api_key: str, hmac_secret: str, timeout: float = 10):
        """
        Raises:
            ValueError: If any credential is empty
        """
        for name, value in (("gateway_url", gateway_url), ("api_key", api_key), ("hmac_secret", hmac_secret)):
            if not value:
                raise ValueError(f"{name} is required")

        self.gateway_url = gateway_url
        self.api_key = api_key
        self.hmac_secret = hmac_secret
        self.timeout = timeout

    def sign(self, body: str) -> str:
        """Hex HMAC-SHA256 of a request body."""
        return hmac.new(self.hmac_secret.encode(), body.encode(), hashlib.sha256).hexdigest()

    def send_email(self, to: str, subject: str, body: str, sender: str = "system") -> None:
        """
        Send one plain-text email.

        Args:
            to: Recipient address
            subject: Subject line
            body: Plain text body
            sender: Gateway sender identity, "auth" or "system"

        Raises:
            ValueError: Unknown sender
            EmailGatewayError: Network failure, unreadable reply, or rejection
        """
        if sender not in VALID_SENDERS:
            raise ValueError(f"sender must be 'auth' or 'system', got '{sender}'")

        payload = json.dumps(
            {"type": "custom", "email": to, "subject": subject, "body": body, "sender": sender},
            separators=(",", ":"),
        )

        try:
            response = requests.post(
                self.gateway_url,
                data=payload,
                headers={
                    "Content-Type": "application/json",
                    "X-API-Key": self.api_key,
                    "X-Signature": self.sign(payload),
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Email gateway unreachable: {e}")
            raise EmailGatewayError(f"Connection failed: {e}")

        try:
            reply = response.json()
        except ValueError:
            logger.error(f"Email gateway sent non-JSON reply ({response.status_code}): {response.text[:200]}")
            raise EmailGatewayError("Invalid response from gateway")

        if not isinstance(reply, dict):
            logger.error(f"Email gateway reply is not a JSON object ({response.status_code}): {response.text[:200]}")
            raise EmailGatewayError("Invalid response from gateway")

        if response.status_code != 200 or not reply.get("success"):
            message = reply.get("message", "Unknown error")
            logger.error(f"Email gateway rejected mail to {to}: {message}")
            raise EmailGatewayError(f"Gateway error: {message}")

        logger.info(f"Email sent to {to}: {subject}")
