"""Outbound SMS to parents.

Senders are best-effort collaborators: callers decide whether a failure matters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol

import requests

logger = logging.getLogger(__name__)


class SmsError(Exception):
    """Raised when the SMS gateway rejects or cannot receive a message."""


class SmsSender(Protocol):
    def send(self, *, phone: str, message: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SmsConfig:
    enabled: bool = False
    base_url: str = ""
    api_key: str = ""
    sender_id: str = ""
    timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SmsConfig":
        data = data or {}
        return cls(
            enabled=bool(data.get("enabled", False)),
            base_url=str(data.get("base_url") or ""),
            api_key=str(data.get("api_key") or ""),
            sender_id=str(data.get("sender_id") or ""),
            timeout=float(data.get("timeout", 10)),
        )


class HttpSmsSender(SmsSender):
    """JSON POST to an HTTP SMS gateway."""

    def __init__(self, config: SmsConfig, *, session: Optional[requests.Session] = None):
        self._config = config
        self._session = session or requests.Session()

    def send(self, *, phone: str, message: str) -> None:
        payload = {"to": phone, "message": message}
        if self._config.sender_id:
            payload["sender"] = self._config.sender_id
        try:
            response = self._session.post(
                self._config.base_url,
                json=payload,
                headers={"Authorization": f"Bearer {self._config.api_key}"},
                timeout=self._config.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise SmsError(f"SMS to {phone} failed: {e}") from e
        logger.info("SMS sent to %s", phone)


class LoggingSmsSender(SmsSender):
    """Used when SMS delivery is disabled; the message only goes to the log."""

    def send(self, *, phone: str, message: str) -> None:
        logger.info("SMS (disabled) to %s: %s", phone, message)


def build_sms_sender(config: SmsConfig) -> SmsSender:
    if config.enabled and config.base_url:
        return HttpSmsSender(config)
    return LoggingSmsSender()


def payment_link(base_url: str, invoice_id: int) -> str:
    return f"{base_url.rstrip('/')}/payment/{int(invoice_id)}"


def enrollment_ready_message(*, student_name: str, registration_number: str, amount: Decimal, school_name: str) -> str:
    return (
        f"{school_name}: payment of {amount:.2f} ETB received for {student_name} "
        f"(registration {registration_number}). The student is ready for enrollment."
    )


def payment_link_message(*, student_name: str, amount: Decimal, link: str, school_name: str) -> str:
    return f"{school_name}: please complete the registration payment of {amount:.2f} ETB for {student_name}: {link}"
