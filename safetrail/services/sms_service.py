"""SMS transport for SOS alerts (Fast2SMS + console)."""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from safetrail.core.config import Settings

logger = logging.getLogger(__name__)

INVALID_NUMBER = "invalid number"
NOT_PERMITTED = "not permitted"
RATE_LIMITED = "rate limited"
INSUFFICIENT_BALANCE = "insufficient balance"
INVALID_MESSAGE = "invalid message"
TIMED_OUT = "timed out"
NETWORK_ERROR = "network error"
PROVIDER_ERROR = "provider error"

# Fast2SMS status_code -> reason
_FAST2SMS_CODES: dict[int, str] = {
    402: INVALID_MESSAGE,
    405: INVALID_NUMBER,
    406: NOT_PERMITTED,
    407: INVALID_MESSAGE,
    409: NOT_PERMITTED,
    411: INVALID_NUMBER,
    412: NOT_PERMITTED,
    413: NOT_PERMITTED,
    414: NOT_PERMITTED,
    415: NOT_PERMITTED,
    416: INSUFFICIENT_BALANCE,
    417: INVALID_MESSAGE,
    996: NOT_PERMITTED,
    998: NOT_PERMITTED,
    999: INSUFFICIENT_BALANCE,
}

# Plain HTTP statuses, used when the body carries no provider code
_HTTP_CODES: dict[int, str] = {
    400: INVALID_MESSAGE,
    401: NOT_PERMITTED,
    403: NOT_PERMITTED,
    408: TIMED_OUT,
    429: RATE_LIMITED,
}


class SmsServiceError(Exception):
    """Raised when the SMS provider cannot be configured."""


@dataclass
class SendResult:
    """Provider-independent outcome of one send attempt."""

    success: bool
    provider_ref: str | None = None
    error_reason: str | None = None
    response: dict[str, Any] | None = None


def normalize_error(code: int | str | None, detail: str | None = None) -> str:
    """Map a provider or HTTP error code to a short human-readable reason."""
    try:
        numeric = int(code) if code is not None else None
    except (TypeError, ValueError):
        numeric = None

    if numeric is not None:
        if numeric in _FAST2SMS_CODES:
            return _FAST2SMS_CODES[numeric]
        if numeric in _HTTP_CODES:
            return _HTTP_CODES[numeric]

    text = (detail or "").lower()
    if "number" in text:
        return INVALID_NUMBER
    if "too many" in text or "rate" in text:
        return RATE_LIMITED
    if "balance" in text:
        return INSUFFICIENT_BALANCE
    return PROVIDER_ERROR


class SmsSender:
    """Sends one text to one recipient. Implementations never raise for provider errors."""

    name = "base"

    def send(self, recipient: str, text: str) -> SendResult:
        raise NotImplementedError


class ConsoleSmsSender(SmsSender):
    """Logs messages instead of sending them. Used for local development."""

    name = "console"

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def send(self, recipient: str, text: str) -> SendResult:
        ref = f"console-{next(self._counter)}"
        logger.info("Console SMS %s to %s: %s", ref, recipient, text)
        return SendResult(
            success=True,
            provider_ref=ref,
            response={"return": True, "message": ["Logged to console"]},
        )


class Fast2SmsSender(SmsSender):
    """Fast2SMS bulk API client, one recipient per request."""

    name = "fast2sms"

    def __init__(
        self,
        api_key: str,
        url: str,
        route: str = "q",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise SmsServiceError("FAST2SMS_API_KEY is not configured")
        self.api_key = api_key
        self.url = url
        self.route = route
        self._client = client or httpx.Client(timeout=timeout)

    def send(self, recipient: str, text: str) -> SendResult:
        payload = {
            "route": self.route,
            "message": text,
            "language": "english",
            "flash": 0,
            "numbers": recipient,
        }
        headers = {"authorization": self.api_key, "Content-Type": "application/json"}

        try:
            response = self._client.post(self.url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("Fast2SMS timeout for %s: %s", recipient, exc)
            return SendResult(success=False, error_reason=TIMED_OUT)
        except httpx.HTTPError as exc:
            logger.warning("Fast2SMS network error for %s: %s", recipient, exc)
            return SendResult(success=False, error_reason=NETWORK_ERROR)

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"raw": body}

        if response.is_success and body.get("return") is True:
            logger.info("Fast2SMS sent to %s (request_id=%s)", recipient, body.get("request_id"))
            return SendResult(
                success=True,
                provider_ref=body.get("request_id"),
                response=body,
            )

        code = body.get("status_code", response.status_code)
        detail = body.get("message")
        if isinstance(detail, list):
            detail = " ".join(str(m) for m in detail)
        reason = normalize_error(code, detail)
        logger.warning("Fast2SMS rejected %s: code=%s reason=%s", recipient, code, reason)
        return SendResult(success=False, error_reason=reason, response=body or None)


class PacedSmsSender(SmsSender):
    """Wraps a sender and waits a fixed delay between consecutive sends.

    One instance is shared by every request, so sends are serialized under a lock.
    """

    def __init__(
        self,
        inner: SmsSender,
        delay_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.inner = inner
        self.name = inner.name
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self._clock = clock
        self._last_sent_at: float | None = None
        self._lock = threading.Lock()

    def send(self, recipient: str, text: str) -> SendResult:
        with self._lock:
            if self._last_sent_at is not None and self.delay_seconds > 0:
                wait = self.delay_seconds - (self._clock() - self._last_sent_at)
                if wait > 0:
                    self._sleep(wait)
            try:
                return self.inner.send(recipient, text)
            finally:
                self._last_sent_at = self._clock()


def build_sms_sender(settings: Settings) -> SmsSender:
    """Create the configured SMS sender wrapped in the send pacer."""
    provider = settings.sms_provider.strip().lower()
    if provider == "fast2sms":
        inner: SmsSender = Fast2SmsSender(
            api_key=settings.fast2sms_api_key,
            url=settings.fast2sms_url,
            route=settings.fast2sms_route,
            timeout=settings.sms_timeout_seconds,
        )
    elif provider == "console":
        inner = ConsoleSmsSender()
    else:
        raise SmsServiceError(f"Unsupported SMS provider '{settings.sms_provider}'. Use 'fast2sms' or 'console'.")
    return PacedSmsSender(inner, settings.sms_send_delay_seconds)
