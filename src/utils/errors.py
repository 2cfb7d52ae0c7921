"""
Error types raised by the Cognito custom SMS sender.

Every error is re-raised to the Lambda runtime so Cognito treats the
notification as not delivered. Messages never carry the plaintext code or
a full phone number.
"""

from typing import Any, Dict, Optional


class SmsSenderError(Exception):
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class ConfigurationError(SmsSenderError):
    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__("configuration_error", message, {"missing": missing or []})
        self.missing = missing or []


class InvalidEventShape(SmsSenderError):
    def __init__(self, message: str = "Invalid event type. Expected customSMSSenderRequestV1"):
        super().__init__("invalid_event_shape", message)


class MissingRecipient(SmsSenderError):
    def __init__(self, message: str = "No phone number found in user attributes"):
        super().__init__("missing_recipient", message)


class InvalidInput(SmsSenderError):
    def __init__(self, message: str = "No code provided to decrypt"):
        super().__init__("invalid_input", message)


class DecryptionError(SmsSenderError):
    def __init__(self, message: str = "Failed to decrypt verification code"):
        super().__init__("decryption_error", message)


class GatewayFailure(SmsSenderError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        if status_code is not None:
            text = f"{message} (HTTP {status_code})"
        else:
            text = message
        super().__init__("gateway_failure", text, {"status_code": status_code})
        self.status_code = status_code
        self.classified_message = message

    @classmethod
    def from_result(cls, failure) -> "GatewayFailure":
        return cls(failure.message, failure.status_code)
