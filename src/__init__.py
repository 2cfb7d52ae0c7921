"""
LOX24 Cognito SMS Sender
========================

AWS Lambda function plugged into a Cognito User Pool as its Custom SMS
Sender trigger. For every SMS Cognito wants to send (sign-up, password
reset, MFA, attribute verification, admin-created users) it decrypts the
KMS-encrypted code, builds the message and sends it through the LOX24 SMS
gateway.

Modules under this package:
- sender.py   → Lambda entry point (sender.lambda_handler) and orchestration
- utils/      → Shared helper modules (config, logging, KMS, LOX24 client, etc.)

Environment variables expected:
  • LOX24_AUTH_TOKEN      - LOX24 API authentication token
  • LOX24_SENDER_ID       - Default sender id for outgoing SMS
  • KMS_KEY_ID            - KMS key the user pool encrypts codes with
  • KMS_KEY_ARN           - Full ARN of that key (decrypt allow-list)
  • LOX24_API_HOST        - LOX24 API hostname (default: api.lox24.eu)
  • LOX24_SERVICE_CODE    - LOX24 service code (default: direct)
  • ENABLE_DEBUG_LOGGING  - "true" for masked request/response logs
  • LOG_LEVEL             - Log verbosity (default: INFO)

The handler is stateless apart from the configuration read at cold start.
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Expose top-level package metadata only
__all__ = ["__version__"]
