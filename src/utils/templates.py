from enum import Enum
from typing import Callable, Dict, Mapping, Optional

from utils.logger import get_logger

logger = get_logger("templates")


class TriggerSource(str, Enum):
    SIGN_UP = "CustomSMSSender_SignUp"
    FORGOT_PASSWORD = "CustomSMSSender_ForgotPassword"
    RESEND_CODE = "CustomSMSSender_ResendCode"
    VERIFY_USER_ATTRIBUTE = "CustomSMSSender_VerifyUserAttribute"
    UPDATE_USER_ATTRIBUTE = "CustomSMSSender_UpdateUserAttribute"
    AUTHENTICATION = "CustomSMSSender_Authentication"
    ADMIN_CREATE_USER = "CustomSMSSender_AdminCreateUser"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["TriggerSource"]:
        try:
            return cls(value)
        except ValueError:
            return None


# SMS templates by Cognito trigger source
TRIGGER_TEMPLATES: Dict[TriggerSource, Callable[[str], str]] = {
    TriggerSource.SIGN_UP: lambda code: (
        f"Welcome to our service! Your verification code is: {code}"
    ),
    TriggerSource.FORGOT_PASSWORD: lambda code: (
        f"Your password reset code is: {code}. "
        "If you didn't request this, please ignore this message."
    ),
    TriggerSource.RESEND_CODE: lambda code: f"Your verification code is: {code}",
    TriggerSource.VERIFY_USER_ATTRIBUTE: lambda code: f"Your verification code is: {code}",
    TriggerSource.UPDATE_USER_ATTRIBUTE: lambda code: (
        f"Your verification code to update your phone number is: {code}"
    ),
    TriggerSource.AUTHENTICATION: lambda code: (
        f"Your authentication code is: {code}. This code will expire in 3 minutes."
    ),
    TriggerSource.ADMIN_CREATE_USER: lambda code: (
        f"Welcome! Your temporary password is: {code}. "
        "Please change it after your first login."
    ),
}


def default_template(code: str) -> str:
    return f"Your verification code is: {code}"


def build_message(
    trigger_source: Optional[str],
    code: Optional[str],
    user_attributes: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Build the SMS body for a Cognito trigger source.

    Unknown trigger sources fall back to the generic verification template
    instead of failing. An absent code renders as an empty value.
    """
    kind = TriggerSource.parse(trigger_source)
    if kind is None:
        logger.warning(
            "templates.unknown_trigger_source",
            extra={"trigger_source": trigger_source},
        )
        template = default_template
    else:
        template = TRIGGER_TEMPLATES[kind]

    return template(code if code is not None else "")
