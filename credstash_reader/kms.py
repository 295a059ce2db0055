"""
Key Unwrapper — recovers the per-secret data and HMAC keys through AWS KMS.

The wrapped key is a KMS ``CiphertextBlob`` holding 64 bytes:
``data_key`` (32B, AES-256-CTR) followed by ``hmac_key`` (32B, HMAC-SHA256).

Security Note:
    Never log the wrapped blob or the unwrapped bytes. Only log key IDs
    and AWS error codes.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import KeyServiceError, MaterialLengthError
from .models import (
    DATA_KEY_SIZE,
    KEY_MATERIAL_SIZE,
    EncryptionContext,
    UnwrappedMaterial,
)

logger = logging.getLogger("credstash.reader")


class KeyUnwrapper(ABC):
    """Port for key-management services."""

    @abstractmethod
    def unwrap(
        self,
        wrapped_key: bytes,
        context: EncryptionContext,
        key_id: str,
    ) -> UnwrappedMaterial:
        """Decrypt a wrapped key blob and split it into data/HMAC keys."""
        ...


def split_key_material(plaintext: bytes) -> UnwrappedMaterial:
    """Split 64 bytes of key material into data and HMAC keys.

    Raises:
        MaterialLengthError: If ``plaintext`` is not exactly 64 bytes.
    """
    if len(plaintext) != KEY_MATERIAL_SIZE:
        raise MaterialLengthError(len(plaintext), KEY_MATERIAL_SIZE)
    return UnwrappedMaterial(
        data_key=plaintext[:DATA_KEY_SIZE],
        hmac_key=plaintext[DATA_KEY_SIZE:],
    )


class KMSKeyUnwrapper(KeyUnwrapper):
    """Unwraps credstash keys with ``kms.decrypt``."""

    def __init__(self, kms_client: Any):
        self._kms = kms_client

    def unwrap(
        self,
        wrapped_key: bytes,
        context: EncryptionContext,
        key_id: str,
    ) -> UnwrappedMaterial:
        """Call KMS Decrypt and split the returned plaintext.

        Args:
            wrapped_key: Raw KMS ciphertext blob.
            context: Encryption context used when the key was wrapped.
            key_id: Optional KMS key id/alias; sent only when non-empty.

        Returns:
            Call-scoped ``UnwrappedMaterial``.

        Raises:
            KeyServiceError: If KMS rejects the request.
            MaterialLengthError: If KMS returns other than 64 bytes.
        """
        params: dict[str, Any] = {
            "CiphertextBlob": wrapped_key,
            "EncryptionContext": dict(context or {}),
        }
        if key_id:
            params["KeyId"] = key_id
        try:
            response = self._kms.decrypt(**params)
        except ClientError as err:
            error = err.response.get("Error", {})
            code = error.get("Code")
            logger.warning("KMS decrypt rejected (key_id=%s): %s", key_id, code)
            raise KeyServiceError(
                f"KMS decrypt failed with {code}: {error.get('Message', '')}",
                code=code,
            ) from err
        except BotoCoreError as err:
            code = type(err).__name__
            logger.warning("KMS decrypt unavailable (key_id=%s): %s", key_id, code)
            raise KeyServiceError(f"KMS decrypt failed with {code}", code=code) from err
        return split_key_material(response["Plaintext"])
