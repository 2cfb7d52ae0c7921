import asyncio
import json
import logging

import httpx
import pytest

from utils import lox24
from utils.config import Settings
from utils.lox24 import (
    AUTH_HEADER,
    TIMEOUT_ERROR,
    UNEXPECTED_ERROR,
    DispatchFailure,
    DispatchSuccess,
    Lox24Client,
    SendOptions,
    build_payload,
    error_message_for_status,
)

PHONE = "+4915112345678"

SETTINGS = Settings(
    auth_token="tok-123",
    sender_id="MyApp",
    kms_key_id="alias/cognito-sms",
    kms_key_arn="arn:aws:kms:eu-central-1:111122223333:key/abcd",
)


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code=201, body=None, text=None):
        self.status_code = status_code
        self.body = body
        self.text = text
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)


class CollectingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def _client(handler, settings=SETTINGS):
    return Lox24Client(settings, transport=httpx.MockTransport(handler))


def test_build_payload_omits_absent_optionals():
    payload = build_payload(PHONE, "Your code is: 1234", SendOptions(), SETTINGS)

    assert payload == {
        "sender_id": "MyApp",
        "text": "Your code is: 1234",
        "service_code": "direct",
        "phone": PHONE,
        "is_unicode": False,
    }


def test_build_payload_with_options():
    options = SendOptions(
        sender_id="ACME",
        service_code="text2speech",
        callback_data="jdoe",
        delivery_at=1767225600,
        voice_lang="DE",
    )
    payload = build_payload(PHONE, "Ihr Code: 1234 ✓", options, SETTINGS)

    assert payload["sender_id"] == "ACME"
    assert payload["service_code"] == "text2speech"
    assert payload["callback_data"] == "jdoe"
    assert payload["delivery_at"] == 1767225600
    assert payload["voice_lang"] == "DE"
    assert payload["is_unicode"] is True


@pytest.mark.parametrize(
    "status_code, fragment",
    [
        (400, "Invalid input"),
        (401, "Authentication failed"),
        (402, "Insufficient funds"),
        (403, "Account not activated"),
        (404, "API endpoint not found"),
        (429, "Rate limit exceeded"),
        (500, "internal error"),
        (503, "temporarily unavailable"),
    ],
)
def test_error_message_for_known_status(status_code, fragment):
    assert fragment in error_message_for_status(status_code)


def test_error_message_for_unmapped_status():
    assert error_message_for_status(418) == UNEXPECTED_ERROR
    assert error_message_for_status(200) == UNEXPECTED_ERROR


@pytest.mark.asyncio
async def test_send_posts_to_sms_endpoint():
    handler = RecordingHandler(201, body={"uuid": "b7a3", "status_code": 100})
    result = await _client(handler).send(PHONE, "Your verification code is: 123456")

    assert isinstance(result, DispatchSuccess)
    assert result.success is True
    assert result.status_code == 201
    assert result.data == {"uuid": "b7a3", "status_code": 100}

    assert len(handler.requests) == 1
    request = handler.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.lox24.eu/sms"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers[AUTH_HEADER] == "tok-123"
    assert int(request.headers["Content-Length"]) == len(request.content)

    body = json.loads(request.content)
    assert body["phone"] == PHONE
    assert body["text"] == "Your verification code is: 123456"
    assert body["sender_id"] == "MyApp"
    assert "callback_data" not in body


@pytest.mark.asyncio
async def test_send_uses_configured_host():
    handler = RecordingHandler(201, body={})
    settings = Settings(
        auth_token="tok", sender_id="s", kms_key_id="k", kms_key_arn="a", api_host="api.example.test"
    )
    await _client(handler, settings).send(PHONE, "hi")

    assert str(handler.requests[0].url) == "https://api.example.test/sms"


@pytest.mark.asyncio
async def test_send_201_with_invalid_json_returns_raw_text():
    handler = RecordingHandler(201, text="created, not json")
    result = await _client(handler).send(PHONE, "hi")

    assert isinstance(result, DispatchSuccess)
    assert result.data == "created, not json"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, fragment",
    [(401, "Authentication failed"), (429, "Rate limit"), (418, "Unexpected error")],
)
async def test_send_non_201_is_failure(status_code, fragment):
    handler = RecordingHandler(status_code, body={"detail": "nope"})
    result = await _client(handler).send(PHONE, "hi")

    assert isinstance(result, DispatchFailure)
    assert result.success is False
    assert result.status_code == status_code
    assert fragment in result.message


@pytest.mark.asyncio
async def test_send_200_is_not_success():
    result = await _client(RecordingHandler(200, body={})).send(PHONE, "hi")

    assert isinstance(result, DispatchFailure)
    assert result.status_code == 200


@pytest.mark.asyncio
async def test_send_transport_error_is_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = await _client(handler).send(PHONE, "hi")

    assert isinstance(result, DispatchFailure)
    assert result.status_code is None
    assert "ConnectError" in result.message


@pytest.mark.asyncio
async def test_send_times_out():
    async def slow_handler(request):
        await asyncio.sleep(5)
        return httpx.Response(201, json={})

    settings = Settings(
        auth_token="tok", sender_id="s", kms_key_id="k", kms_key_arn="a", timeout_seconds=0.05
    )
    result = await Lox24Client(settings, transport=httpx.MockTransport(slow_handler)).send(PHONE, "hi")

    assert isinstance(result, DispatchFailure)
    assert result.status_code is None
    assert result.message == TIMEOUT_ERROR


@pytest.mark.asyncio
async def test_debug_logging_masks_phone_and_code():
    settings = Settings(
        auth_token="tok", sender_id="s", kms_key_id="k", kms_key_arn="a", debug_logging=True
    )
    handler = RecordingHandler(201, body={"ok": True})
    collector = CollectingHandler()

    lox24.logger.addHandler(collector)
    try:
        await Lox24Client(settings, transport=httpx.MockTransport(handler)).send(
            PHONE, "Your verification code is: 123456"
        )
    finally:
        lox24.logger.removeHandler(collector)

    request_logs = [r for r in collector.records if r.getMessage() == "lox24.request"]
    assert len(request_logs) == 1
    payload = request_logs[0].payload
    assert payload["phone"] == "+49********678"
    assert payload["text"] == "Your verification code is: ****"
    assert all("123456" not in str(vars(r)) for r in collector.records)


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code, event_name", [(201, "lox24.response"), (400, "lox24.api_error")])
async def test_response_logs_never_carry_full_phone(status_code, event_name):
    settings = Settings(
        auth_token="tok", sender_id="s", kms_key_id="k", kms_key_arn="a", debug_logging=True
    )
    handler = RecordingHandler(
        status_code,
        body={"uuid": "b7a3", "phone": PHONE, "text": "Ihr Code für123456"},
    )
    collector = CollectingHandler()

    lox24.logger.addHandler(collector)
    try:
        await Lox24Client(settings, transport=httpx.MockTransport(handler)).send(
            PHONE, "Ihr Code für123456"
        )
    finally:
        lox24.logger.removeHandler(collector)

    assert [r for r in collector.records if r.getMessage() == event_name]
    for record in collector.records:
        dumped = str(vars(record))
        assert PHONE not in dumped
        assert "4915112345678" not in dumped
        assert "123456" not in dumped
