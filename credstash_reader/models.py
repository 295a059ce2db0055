"""
Credstash data model — stored records and call-scoped key material.

Security Note:
    ``UnwrappedMaterial`` lives only for the duration of one ``get_secret``
    call. Its repr hides the key bytes so it cannot leak through logs or
    tracebacks.
"""
from dataclasses import dataclass, field
from typing import Mapping

# Caller-supplied KMS encryption context, passed verbatim to Decrypt.
EncryptionContext = Mapping[str, str]

DATA_KEY_SIZE = 32  # AES-256
HMAC_KEY_SIZE = 32
KEY_MATERIAL_SIZE = DATA_KEY_SIZE + HMAC_KEY_SIZE

VERSION_WIDTH = 19


@dataclass(frozen=True)
class SecretRecord:
    """One version of a secret as stored in the credstash table.

    ``wrapped_key`` and ``ciphertext`` are raw bytes (already base64-decoded);
    ``hmac_digest`` is the hex-encoded HMAC-SHA256 of ``ciphertext``.
    """
    name: str
    version: str
    wrapped_key: bytes = field(repr=False)
    ciphertext: bytes = field(repr=False)
    hmac_digest: str = field(repr=False)


@dataclass(frozen=True)
class UnwrappedMaterial:
    data_key: bytes = field(repr=False)
    hmac_key: bytes = field(repr=False)


def pad_version(version: int) -> str:
    """Render an integer version the way credstash stores it (19 digits)."""
    if version < 0:
        raise ValueError(f"version must be non-negative, got {version}")
    return str(version).zfill(VERSION_WIDTH)
