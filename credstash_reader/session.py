"""
AWS session construction for the credstash client.

Three ways to obtain credentials, checked in order:
- a named shared-config profile (``profile`` other than "default")
- an IAM role assumed through STS (``role_arn``)
- the default boto3 credential chain
"""
import logging
from typing import Any, Optional

import boto3

from .config import DEFAULT_PROFILE, ClientConfig

logger = logging.getLogger("credstash.reader")


def assume_role_session(
    base_session: Any,
    role_arn: str,
    region: Optional[str] = None,
    duration_seconds: Optional[int] = None,
    session_name: str = "credstash-reader",
) -> boto3.Session:
    """Assume ``role_arn`` and return a session using the temporary credentials."""
    sts = base_session.client("sts", region_name=region)
    params: dict[str, Any] = {
        "RoleArn": role_arn,
        "RoleSessionName": session_name,
    }
    if duration_seconds:
        params["DurationSeconds"] = duration_seconds
    credentials = sts.assume_role(**params)["Credentials"]
    return boto3.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=region,
    )


def build_session(config: ClientConfig) -> boto3.Session:
    """Create the boto3 session described by ``config``."""
    if config.profile != DEFAULT_PROFILE:
        logger.debug("Creating a session for profile: %s", config.profile)
        return boto3.Session(
            profile_name=config.profile, region_name=config.region,
        )
    if config.role_arn:
        logger.debug("Creating a session with assume role: %s", config.role_arn)
        return assume_role_session(
            boto3.Session(region_name=config.region),
            config.role_arn,
            region=config.region,
            duration_seconds=config.role_duration_seconds,
            session_name=config.role_session_name,
        )
    logger.debug("Creating a session from the default credential chain")
    return boto3.Session(region_name=config.region)
