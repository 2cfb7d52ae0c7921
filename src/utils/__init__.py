"""
LOX24 Cognito SMS Sender Utilities
==================================

Shared helper modules for the Custom SMS Sender Lambda:

- config.py      → environment-driven, immutable Settings
- errors.py      → error taxonomy re-raised to Cognito
- logger.py      → structured JSON logging
- masking.py     → phone / code masking for safe logs
- templates.py   → SMS text per Cognito trigger source
- kms.py         → AWS Encryption SDK decryption of Cognito codes
- lox24.py       → async LOX24 SMS gateway client

Nothing in this package keeps per-request state, so it is safe to reuse
across warm Lambda invocations.
"""

from utils.errors import (
    ConfigurationError,
    DecryptionError,
    GatewayFailure,
    InvalidEventShape,
    InvalidInput,
    MissingRecipient,
    SmsSenderError,
)

__all__ = [
    "ConfigurationError",
    "DecryptionError",
    "GatewayFailure",
    "InvalidEventShape",
    "InvalidInput",
    "MissingRecipient",
    "SmsSenderError",
]
