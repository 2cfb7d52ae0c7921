import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from utils.errors import ConfigurationError
from utils.logger import get_logger

logger = get_logger("config")

DEFAULT_API_HOST = "api.lox24.eu"
DEFAULT_SERVICE_CODE = "direct"
DEFAULT_TIMEOUT_SECONDS = 10.0

# (env var, Settings field) for values the function cannot start without
_REQUIRED = (
    ("LOX24_AUTH_TOKEN", "auth_token"),
    ("LOX24_SENDER_ID", "sender_id"),
    ("KMS_KEY_ID", "kms_key_id"),
    ("KMS_KEY_ARN", "kms_key_arn"),
)


@dataclass(frozen=True)
class Settings:
    """
    Immutable runtime configuration, built once per Lambda container.
    """

    auth_token: str
    sender_id: str
    kms_key_id: str
    kms_key_arn: str
    api_host: str = DEFAULT_API_HOST
    service_code: str = DEFAULT_SERVICE_CODE
    debug_logging: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def redacted(self) -> Dict[str, Any]:
        return {
            "auth_token": "****",
            "sender_id": self.sender_id,
            "kms_key_id": self.kms_key_id,
            "kms_key_arn": self.kms_key_arn,
            "api_host": self.api_host,
            "service_code": self.service_code,
            "debug_logging": self.debug_logging,
        }


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Load the sender configuration from environment variables.

    Required:
      LOX24_AUTH_TOKEN     - LOX24 API authentication token
      LOX24_SENDER_ID      - default sender id for outgoing SMS
      KMS_KEY_ID           - generator key used by the Cognito user pool
      KMS_KEY_ARN          - full ARN of the key allowed to decrypt codes

    Optional:
      LOX24_API_HOST       - gateway hostname (default: api.lox24.eu)
      LOX24_SERVICE_CODE   - LOX24 service code (default: direct)
      ENABLE_DEBUG_LOGGING - "true" for masked payload logs (default: false)

    Raises ConfigurationError listing every missing variable.
    """
    env = os.environ if environ is None else environ

    values = {}
    missing = []
    for env_name, field_name in _REQUIRED:
        value = (env.get(env_name) or "").strip()
        if not value:
            missing.append(env_name)
        values[field_name] = value

    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}"
        logger.error(msg, extra={"missing": missing})
        raise ConfigurationError(msg, missing)

    return Settings(
        api_host=(env.get("LOX24_API_HOST") or "").strip() or DEFAULT_API_HOST,
        service_code=(env.get("LOX24_SERVICE_CODE") or "").strip() or DEFAULT_SERVICE_CODE,
        debug_logging=_flag(env.get("ENABLE_DEBUG_LOGGING")),
        **values,
    )
