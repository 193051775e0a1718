"""SMS transport tests (Fast2SMS via httpx.MockTransport)."""

import json
import threading

import httpx
import pytest

from safetrail.core.config import Settings
from safetrail.services.sms_service import (
    ConsoleSmsSender,
    Fast2SmsSender,
    PacedSmsSender,
    SmsServiceError,
    build_sms_sender,
    normalize_error,
)

URL = "https://sms.test/dev/bulkV2"


def _sender(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return Fast2SmsSender(api_key="key-123", url=URL, client=client)


def test_fast2sms_success_payload_and_headers():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"return": True, "request_id": "abc123", "message": ["SMS sent successfully."]})

    result = _sender(handler).send("9876543210", "help")

    assert result.success is True
    assert result.provider_ref == "abc123"
    assert result.error_reason is None
    assert seen["auth"] == "key-123"
    assert seen["body"] == {
        "route": "q",
        "message": "help",
        "language": "english",
        "flash": 0,
        "numbers": "9876543210",
    }


def test_fast2sms_provider_code_normalized():
    def handler(request):
        return httpx.Response(400, json={"return": False, "status_code": 411, "message": "Invalid Numbers"})

    result = _sender(handler).send("12", "help")
    assert result.success is False
    assert result.error_reason == "invalid number"
    assert result.response["status_code"] == 411


def test_fast2sms_http_429_is_rate_limited():
    result = _sender(lambda request: httpx.Response(429, text="slow down")).send("1", "x")
    assert result.success is False
    assert result.error_reason == "rate limited"


def test_fast2sms_timeout_and_network_errors():
    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    def refused(request):
        raise httpx.ConnectError("refused", request=request)

    assert _sender(timeout).send("1", "x").error_reason == "timed out"
    assert _sender(refused).send("1", "x").error_reason == "network error"


def test_fast2sms_requires_api_key():
    with pytest.raises(SmsServiceError):
        Fast2SmsSender(api_key="", url=URL)


@pytest.mark.parametrize(
    "code, detail, reason",
    [
        (412, None, "not permitted"),
        ("416", None, "insufficient balance"),
        (407, None, "invalid message"),
        (None, "Too many requests", "rate limited"),
        (None, "Invalid Numbers", "invalid number"),
        (500, "boom", "provider error"),
        ("weird", None, "provider error"),
    ],
)
def test_normalize_error(code, detail, reason):
    assert normalize_error(code, detail) == reason


def test_paced_sender_waits_between_sends_only(make_sender):
    waits = []
    clock = {"t": 100.0}
    inner = make_sender()
    paced = PacedSmsSender(inner, delay_seconds=1.0, sleep=waits.append, clock=lambda: clock["t"])

    paced.send("1", "a")
    clock["t"] = 100.4
    paced.send("2", "b")
    clock["t"] = 105.0
    paced.send("3", "c")

    assert waits == [pytest.approx(0.6)]
    assert [r for r, _ in inner.calls] == ["1", "2", "3"]


def test_paced_sender_serializes_concurrent_sends(make_sender):
    """Two threads sending at the same instant: the second one waits out the full delay."""
    waits = []
    inner = make_sender()
    paced = PacedSmsSender(inner, delay_seconds=1.0, sleep=waits.append, clock=lambda: 50.0)
    start = threading.Barrier(2)

    def worker(recipient):
        start.wait()
        paced.send(recipient, "help")

    threads = [threading.Thread(target=worker, args=(r,)) for r in ("A", "B")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert waits == [1.0]
    assert sorted(r for r, _ in inner.calls) == ["A", "B"]


def test_console_sender_refs_increment_without_keeping_messages():
    sender = ConsoleSmsSender()
    refs = [sender.send(str(i), "help").provider_ref for i in range(500)]

    assert refs[0] == "console-1"
    assert refs[-1] == "console-500"
    assert not hasattr(sender, "sent")


def test_build_sms_sender_from_settings():
    console = build_sms_sender(Settings(sms_provider="console", sms_send_delay_seconds=0.5))
    assert isinstance(console, PacedSmsSender)
    assert isinstance(console.inner, ConsoleSmsSender)
    assert console.delay_seconds == 0.5

    fast = build_sms_sender(Settings(sms_provider="Fast2SMS", fast2sms_api_key="k"))
    assert isinstance(fast.inner, Fast2SmsSender)

    with pytest.raises(SmsServiceError):
        build_sms_sender(Settings(sms_provider="pigeon"))
