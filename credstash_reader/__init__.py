"""Credstash Reader — decrypt secrets stored by credstash.

Security Note (Threat Model):
    Secrets are decrypted in process memory and returned to the caller.
    Integrity is checked with HMAC-SHA256 before decryption; transport
    security to DynamoDB and KMS is provided by boto3 (TLS).
"""

from .client import SecretClient
from .config import (
    ClientConfig,
    load_encryption_context,
    load_encryption_context_from_env,
)
from .exceptions import (
    CredstashError,
    SecretNotFound,
    StoreError,
    KeyServiceError,
    MaterialLengthError,
    IntegrityError,
    CipherError,
)
from .models import SecretRecord, UnwrappedMaterial, pad_version
from .version import __version__

__all__ = [
    "SecretClient",
    "ClientConfig",
    "load_encryption_context",
    "load_encryption_context_from_env",
    "CredstashError",
    "SecretNotFound",
    "StoreError",
    "KeyServiceError",
    "MaterialLengthError",
    "IntegrityError",
    "CipherError",
    "SecretRecord",
    "UnwrappedMaterial",
    "pad_version",
    "__version__",
]
