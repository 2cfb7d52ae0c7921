"""
LOX24 SMS gateway client.

One POST /sms per invocation. HTTP 201 is the only success; every other
status, transport error or timeout comes back as a DispatchFailure so the
caller decides what to raise.
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx

from utils.config import Settings
from utils.logger import get_logger
from utils.masking import contains_unicode, mask_code, mask_gateway_body, mask_phone_number

logger = get_logger("lox24")

SMS_PATH = "/sms"
AUTH_HEADER = "X-LOX24-AUTH-TOKEN"

ERROR_MESSAGES = {
    400: "Invalid input - Check phone number format and message content",
    401: "Authentication failed - LOX24 API token is invalid or inactive",
    402: "Insufficient funds - Please add credit to your LOX24 account",
    403: "Account not activated - Please contact LOX24 support",
    404: "API endpoint not found",
    429: "Rate limit exceeded - Too many requests",
    500: "LOX24 API internal error",
    503: "LOX24 API temporarily unavailable",
}
UNEXPECTED_ERROR = "Unexpected error from LOX24 API"
TIMEOUT_ERROR = "LOX24 API request timeout"


def error_message_for_status(status_code: int) -> str:
    return ERROR_MESSAGES.get(status_code, UNEXPECTED_ERROR)


@dataclass
class SendOptions:
    sender_id: Optional[str] = None
    service_code: Optional[str] = None
    callback_data: Optional[str] = None
    delivery_at: Optional[int] = None
    voice_lang: Optional[str] = None


@dataclass(frozen=True)
class DispatchSuccess:
    status_code: int
    data: Any

    success = True


@dataclass(frozen=True)
class DispatchFailure:
    status_code: Optional[int]
    message: str

    success = False


DispatchResult = Union[DispatchSuccess, DispatchFailure]


def build_payload(
    phone: str,
    message: str,
    options: SendOptions,
    settings: Settings,
) -> Dict[str, Any]:
    """
    Build the LOX24 request body. Optional fields are left out entirely
    when they are not set.
    """
    payload: Dict[str, Any] = {
        "sender_id": options.sender_id or settings.sender_id,
        "text": message,
        "service_code": options.service_code or settings.service_code,
        "phone": phone,
        "is_unicode": contains_unicode(message),
    }
    if options.callback_data:
        payload["callback_data"] = options.callback_data
    if options.delivery_at:
        payload["delivery_at"] = options.delivery_at
    if options.voice_lang:
        payload["voice_lang"] = options.voice_lang
    return payload


class Lox24Client:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._settings = settings
        # Tests pass an httpx.MockTransport here
        self._transport = transport

    @property
    def url(self) -> str:
        return f"https://{self._settings.api_host}{SMS_PATH}"

    def _headers(self, body: bytes) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
            AUTH_HEADER: self._settings.auth_token,
        }

    async def send(
        self,
        phone: str,
        message: str,
        options: Optional[SendOptions] = None,
    ) -> DispatchResult:
        payload = build_payload(phone, message, options or SendOptions(), self._settings)
        body = json.dumps(payload).encode("utf-8")

        if self._settings.debug_logging:
            logger.info(
                "lox24.request",
                extra={
                    "payload": {
                        **payload,
                        "phone": mask_phone_number(phone),
                        "text": mask_code(message),
                    }
                },
            )

        timeout = self._settings.timeout_seconds
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                # wait_for cancels the in-flight request once the budget is spent
                response = await asyncio.wait_for(
                    client.post(self.url, content=body, headers=self._headers(body)),
                    timeout=timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.error(
                "lox24.timeout",
                extra={"to": mask_phone_number(phone), "timeout_seconds": timeout},
            )
            return DispatchFailure(None, TIMEOUT_ERROR)
        except httpx.HTTPError as e:
            logger.error(
                "lox24.request_error",
                extra={"to": mask_phone_number(phone), "error_type": type(e).__name__, "error": str(e)},
            )
            return DispatchFailure(None, f"LOX24 API request error: {type(e).__name__}")

        return self._classify(response, phone)

    def _classify(self, response: httpx.Response, phone: str) -> DispatchResult:
        status_code = response.status_code

        if status_code != 201:
            message = error_message_for_status(status_code)
            logger.error(
                "lox24.api_error",
                extra={
                    "status_code": status_code,
                    "error": message,
                    "response_preview": str(mask_gateway_body(response.text, phone))[:500],
                },
            )
            return DispatchFailure(status_code, message)

        logger.info("lox24.sms_sent", extra={"to": mask_phone_number(phone)})
        if self._settings.debug_logging:
            logger.info("lox24.response", extra={"body": mask_gateway_body(response.text, phone)})

        try:
            data = response.json()
        except ValueError:
            # A 201 is still a send, even when the body is not JSON
            data = response.text
        return DispatchSuccess(status_code, data)
