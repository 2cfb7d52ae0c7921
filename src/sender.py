import asyncio
import json
from typing import Any, Dict

from utils.config import Settings, load_settings
from utils.errors import GatewayFailure, InvalidEventShape, MissingRecipient
from utils.kms import KmsDecryptor
from utils.logger import get_logger
from utils.lox24 import Lox24Client, SendOptions
from utils.masking import mask_event, mask_phone_number
from utils.templates import build_message

logger = get_logger("sender")

REQUEST_TYPE = "customSMSSenderRequestV1"
SUCCESS_MESSAGE = "SMS sent successfully via LOX24"


class SmsSenderHandler:
    """
    Runs one Cognito Custom SMS Sender event through
    validate -> decrypt -> compose -> dispatch.

    Any error is logged with context and re-raised; Cognito owns retries.
    """

    def __init__(self, settings: Settings, decryptor, dispatcher):
        self._settings = settings
        self._decryptor = decryptor
        self._dispatcher = dispatcher

    async def handle(self, event: Dict[str, Any]) -> Dict[str, Any]:
        event = event if isinstance(event, dict) else {}
        trigger_source = event.get("triggerSource")
        user_name = event.get("userName")

        logger.info(
            "sender.event_received",
            extra={
                "trigger_source": trigger_source,
                "user_pool_id": event.get("userPoolId"),
                "user_name": user_name,
            },
        )
        if self._settings.debug_logging:
            logger.info("sender.event_full", extra={"event": mask_event(event)})

        try:
            request = self._validate(event)

            # 1) Recipient
            attributes = request.get("userAttributes") or {}
            phone = attributes.get("phone_number")
            if not phone:
                raise MissingRecipient()

            # 2) Decrypt the code, if Cognito sent one
            code = None
            ciphertext = request.get("code")
            if ciphertext:
                code = await asyncio.to_thread(self._decryptor.decrypt, ciphertext)
                logger.info("sender.code_decrypted", extra={"trigger_source": trigger_source})
            else:
                logger.warning(
                    "sender.code_missing",
                    extra={"trigger_source": trigger_source, "user_name": user_name},
                )

            # 3) Compose
            message = build_message(trigger_source, code, attributes)

            # 4) Dispatch
            options = self._send_options(event, request)
            result = await self._dispatcher.send(phone, message, options)
            if not result.success:
                raise GatewayFailure.from_result(result)

            logger.info(
                "sender.sms_dispatched",
                extra={
                    "trigger_source": trigger_source,
                    "user_name": user_name,
                    "to": mask_phone_number(phone),
                    "status_code": result.status_code,
                },
            )
        except Exception as e:
            logger.error(
                "sender.error",
                extra={
                    "trigger_source": trigger_source,
                    "user_name": user_name,
                    "error_code": getattr(e, "code", type(e).__name__),
                    "error": str(e),
                },
                exc_info=True,
            )
            # Re-raise so Cognito knows the send failed
            raise

        return {
            "statusCode": 200,
            "body": json.dumps({"success": True, "message": SUCCESS_MESSAGE}),
        }

    @staticmethod
    def _validate(event: Dict[str, Any]) -> Dict[str, Any]:
        request = event.get("request")
        if not isinstance(request, dict) or request.get("type") != REQUEST_TYPE:
            raise InvalidEventShape()
        for key in ("userAttributes", "clientMetadata"):
            if request.get(key) is not None and not isinstance(request[key], dict):
                raise InvalidEventShape(f"Invalid event: request.{key} must be an object")
        return request

    @staticmethod
    def _send_options(event: Dict[str, Any], request: Dict[str, Any]) -> SendOptions:
        # Cognito username goes back as callback_data for delivery tracking
        options = SendOptions(callback_data=event.get("userName"))

        metadata = request.get("clientMetadata") or {}
        if metadata.get("senderId"):
            options.sender_id = metadata["senderId"]
        if metadata.get("voiceLang"):
            options.voice_lang = metadata["voiceLang"]
        return options


# Built once per container; a missing env var fails the cold start
settings = load_settings()
sms_sender = SmsSenderHandler(settings, KmsDecryptor(settings), Lox24Client(settings))
logger.info("sender.initialized", extra={"config": settings.redacted()})


def lambda_handler(event, context):
    logger.info(
        "sender.lambda_start",
        extra={"request_id": getattr(context, "aws_request_id", None)},
    )
    return asyncio.run(sms_sender.handle(event))
