# utils/kms.py

import base64
from typing import List, Optional

import aws_encryption_sdk
import botocore.session
from aws_encryption_sdk import CommitmentPolicy, StrictAwsKmsMasterKeyProvider

from utils.config import Settings
from utils.errors import DecryptionError, InvalidInput
from utils.logger import get_logger

logger = get_logger("kms")


def _key_ids(settings: Settings) -> List[str]:
    # Generator key first, then the allow-listed ARN (deduplicated)
    key_ids = [settings.kms_key_id]
    if settings.kms_key_arn not in key_ids:
        key_ids.append(settings.kms_key_arn)
    return key_ids


class KmsDecryptor:
    """
    Decrypts the code Cognito encrypts with the user pool's KMS key.

    Cognito encrypts codes with the AWS Encryption SDK, so decryption goes
    through the same SDK in strict mode: only data keys wrapped by one of the
    configured key ids are accepted.
    """

    def __init__(self, settings: Settings, client=None, key_provider=None, botocore_session=None):
        self._settings = settings
        self._client = client or aws_encryption_sdk.EncryptionSDKClient(
            commitment_policy=CommitmentPolicy.REQUIRE_ENCRYPT_ALLOW_DECRYPT
        )
        self._key_provider = key_provider
        self._botocore_session = botocore_session

    @property
    def key_provider(self):
        # Built on first use so boto3 KMS clients are only created when needed
        if self._key_provider is None:
            self._key_provider = StrictAwsKmsMasterKeyProvider(
                botocore_session=self._botocore_session or botocore.session.Session(),
                key_ids=_key_ids(self._settings),
            )
        return self._key_provider

    def decrypt(self, ciphertext_b64: Optional[str]) -> str:
        if not ciphertext_b64:
            raise InvalidInput()

        try:
            ciphertext = base64.b64decode(ciphertext_b64, validate=True)
            plaintext, _header = self._client.decrypt(
                source=ciphertext,
                key_provider=self.key_provider,
            )
            return plaintext.decode("utf-8")
        except Exception as e:
            # Bad base64, SDK, KMS (ClientError) and credential errors all end up here.
            # Only the exception type is logged, never the cause.
            logger.error("kms.decrypt_failed", extra={"error_type": type(e).__name__})
            raise DecryptionError() from None
