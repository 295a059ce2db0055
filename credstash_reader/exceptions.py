"""Error taxonomy for secret retrieval.

Every failure is terminal for the current ``get_secret`` call. Messages carry
secret names, versions, table names and AWS error codes only; never key
material, unwrapped bytes, ciphertext or plaintext.
"""
from typing import Optional


class CredstashError(Exception):
    """Base exception for all credstash reader failures."""


class SecretNotFound(CredstashError):
    """Raised when no record exists for a name (and version)."""

    def __init__(self, name: str, version: str = "", table: str = ""):
        self.name = name
        self.version = version
        self.table = table
        if version:
            msg = f"Secret {name!r} version {version!r} not found in table {table!r}"
        else:
            msg = f"Secret {name!r} not found in table {table!r}"
        super().__init__(msg)


class StoreError(CredstashError):
    """Raised when the secret table cannot be read or holds a malformed record."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class KeyServiceError(CredstashError):
    """Raised when the key-management service rejects an unwrap request."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class MaterialLengthError(CredstashError):
    """Raised when unwrapped key material is not exactly 64 bytes."""

    def __init__(self, length: int, expected: int = 64):
        self.length = length
        self.expected = expected
        super().__init__(
            f"Unwrapped key material must be {expected} bytes, got {length}"
        )


class IntegrityError(CredstashError):
    """Raised when the stored HMAC does not match the ciphertext."""


class CipherError(CredstashError):
    """Raised when the stream cipher cannot be set up or its output is unusable."""


__all__ = [
    "CredstashError",
    "SecretNotFound",
    "StoreError",
    "KeyServiceError",
    "MaterialLengthError",
    "IntegrityError",
    "CipherError",
]
