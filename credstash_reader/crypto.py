"""
Credstash Crypto Core — HMAC verification and AES-CTR decryption.

Record layout (as written by credstash):
- ``contents``: AES-256-CTR(data_key, plaintext), initial counter block = 1
- ``hmac``: hex(HMAC-SHA256(hmac_key, contents))

Security Note:
    ``verify_hmac`` must succeed before ``decrypt_data`` is called.
    Never log plaintext, ciphertext or key values.
"""
import binascii
import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .exceptions import CipherError, IntegrityError
from .models import DATA_KEY_SIZE, SecretRecord

logger = logging.getLogger("credstash.reader")

BLOCK_SIZE = 16
# 128-bit big-endian counter starting at 1; fixed by existing stored data.
INITIAL_COUNTER = (1).to_bytes(BLOCK_SIZE, "big")


# ---------------------------------------------------------------------------
# Integrity
# ---------------------------------------------------------------------------

def compute_hmac(ciphertext: bytes, hmac_key: bytes) -> bytes:
    """Return the raw HMAC-SHA256 of ``ciphertext`` under ``hmac_key``."""
    h = hmac.HMAC(hmac_key, hashes.SHA256())
    h.update(ciphertext)
    return h.finalize()


def verify_hmac(record: SecretRecord, hmac_key: bytes) -> None:
    """Check the stored digest of a record in constant time.

    Args:
        record: Stored secret record.
        hmac_key: Second half of the unwrapped key material.

    Raises:
        IntegrityError: If the digest is not valid hex or does not match.
    """
    try:
        expected = binascii.unhexlify(record.hmac_digest)
    except (binascii.Error, ValueError):
        raise IntegrityError(
            f"Stored HMAC for {record.name!r} version {record.version!r} "
            "is not valid hex"
        ) from None
    h = hmac.HMAC(hmac_key, hashes.SHA256())
    h.update(record.ciphertext)
    try:
        # HMAC.verify compares in constant time.
        h.verify(expected)
    except InvalidSignature:
        logger.warning(
            "HMAC mismatch for secret=%s version=%s", record.name, record.version,
        )
        raise IntegrityError(
            f"Computed HMAC on {record.name!r} version {record.version!r} "
            "does not match stored HMAC"
        ) from None


# ---------------------------------------------------------------------------
# Decryption
# ---------------------------------------------------------------------------

def _ctr_cipher(data_key: bytes) -> Cipher:
    if len(data_key) != DATA_KEY_SIZE:
        raise CipherError(
            f"Data key must be {DATA_KEY_SIZE} bytes, got {len(data_key)}"
        )
    try:
        return Cipher(algorithms.AES(data_key), modes.CTR(INITIAL_COUNTER))
    except ValueError as err:
        raise CipherError(f"Unable to initialize AES-CTR: {err}") from None


def decrypt_data(ciphertext: bytes, data_key: bytes) -> bytes:
    """Decrypt credstash contents with AES-256-CTR.

    Args:
        ciphertext: Raw (base64-decoded) contents.
        data_key: First half of the unwrapped key material.

    Returns:
        Plaintext bytes, same length as ``ciphertext``.

    Raises:
        CipherError: If the key is not a valid AES-256 key.
    """
    decryptor = _ctr_cipher(data_key).decryptor()
    return decryptor.update(ciphertext) + decryptor.finalize()


def encrypt_data(plaintext: bytes, data_key: bytes) -> bytes:
    """Inverse of ``decrypt_data``; CTR mode is symmetric."""
    encryptor = _ctr_cipher(data_key).encryptor()
    return encryptor.update(plaintext) + encryptor.finalize()
