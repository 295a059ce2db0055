"""
Client Configuration — validated, immutable settings for SecretClient.

Reads settings from environment variables:
    CREDSTASH_TABLE        = <DynamoDB table>       (default credential-store)
    CREDSTASH_KEY_ID       = <KMS key id or alias>  (default alias/credstash)
    AWS_REGION / AWS_DEFAULT_REGION
    AWS_PROFILE
    CREDSTASH_ROLE_ARN, CREDSTASH_ROLE_DURATION
    CREDSTASH_CONTEXT      = <JSON object of string pairs>

Security Note:
    Encryption contexts are not secret, but are only logged by key name.
"""
import os
import re
import logging
from typing import Optional

import orjson
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("credstash.reader")

DEFAULT_TABLE = "credential-store"
DEFAULT_KEY_ID = "alias/credstash"
DEFAULT_PROFILE = "default"

_ROLE_ARN_PATTERN = re.compile(r"^arn:aws[a-zA-Z-]*:iam::\d{12}:role/.+$")


def load_encryption_context(raw: Optional[str]) -> dict[str, str]:
    """Parse a JSON object into a KMS encryption context.

    Args:
        raw: JSON text, e.g. ``{"app": "billing"}``. Empty or None gives {}.

    Returns:
        Mapping of string keys to string values.

    Raises:
        ValueError: If ``raw`` is not a JSON object of string pairs.
    """
    if not raw:
        return {}
    try:
        parsed = orjson.loads(raw)
    except orjson.JSONDecodeError as err:
        raise ValueError(f"Encryption context is not valid JSON: {err}") from None
    if not isinstance(parsed, dict):
        raise ValueError("Encryption context must be a JSON object")
    for key, value in parsed.items():
        if not isinstance(value, str):
            raise ValueError(
                f"Encryption context value for {key!r} must be a string"
            )
    logger.debug("Loaded encryption context keys: %s", sorted(parsed.keys()))
    return parsed


def load_encryption_context_from_env() -> dict[str, str]:
    """Read the encryption context from CREDSTASH_CONTEXT."""
    return load_encryption_context(os.environ.get("CREDSTASH_CONTEXT"))


class ClientConfig(BaseModel):
    """Validated credstash client configuration."""

    table: str = Field(default=DEFAULT_TABLE)
    key_id: str = Field(default=DEFAULT_KEY_ID)
    region: Optional[str] = None
    profile: str = Field(default=DEFAULT_PROFILE)
    role_arn: Optional[str] = None
    role_duration_seconds: Optional[int] = Field(default=None, ge=900, le=43200)
    role_session_name: str = Field(default="credstash-reader")

    model_config = {"frozen": True}

    @field_validator("table")
    @classmethod
    def validate_table(cls, v: str) -> str:
        """Table name must be set."""
        if not v or not v.strip():
            raise ValueError("table cannot be empty")
        return v

    @field_validator("role_arn")
    @classmethod
    def validate_role_arn(cls, v: Optional[str]) -> Optional[str]:
        """Accept only IAM role ARNs."""
        if v and not _ROLE_ARN_PATTERN.match(v):
            raise ValueError(f"Not an IAM role ARN: {v}")
        return v or None

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create ClientConfig by loading values from environment.

        Returns:
            Populated ClientConfig instance.
        """
        duration = os.environ.get("CREDSTASH_ROLE_DURATION")
        return cls(
            table=os.environ.get("CREDSTASH_TABLE", DEFAULT_TABLE),
            key_id=os.environ.get("CREDSTASH_KEY_ID", DEFAULT_KEY_ID),
            region=(
                os.environ.get("AWS_REGION")
                or os.environ.get("AWS_DEFAULT_REGION")
            ),
            profile=os.environ.get("AWS_PROFILE", DEFAULT_PROFILE),
            role_arn=os.environ.get("CREDSTASH_ROLE_ARN"),
            role_duration_seconds=int(duration) if duration else None,
        )
