"""
Secret Store — reads credstash records from a versioned DynamoDB table.

Table layout:
    name (S, partition key) | version (S, sort key, zero padded)
    key (S, base64 KMS blob) | contents (S, base64) | hmac (S or B, hex)

Security Note:
    Records are immutable once written, so nothing is cached here;
    every lookup re-reads the table.
"""
import base64
import binascii
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from boto3.dynamodb.conditions import Key
from boto3.dynamodb.types import Binary
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import SecretNotFound, StoreError
from .models import SecretRecord

logger = logging.getLogger("credstash.reader")

_REQUIRED_ATTRIBUTES = ("name", "version", "key", "contents", "hmac")


class SecretStore(ABC):
    """Port for versioned secret tables."""

    @abstractmethod
    def get_record(self, name: str, version: str, table: str) -> SecretRecord:
        """Return one record; the latest version when ``version`` is empty.

        Raises:
            SecretNotFound: If no matching record exists.
        """
        ...


def latest_version(items: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """Pick the item with the lexically greatest ``version`` string."""
    if not items:
        return None
    return max(items, key=lambda item: str(item["version"]))


def _as_text(value: Any) -> str:
    if isinstance(value, Binary):
        value = value.value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("ascii")
    return str(value)


def record_from_item(item: dict[str, Any]) -> SecretRecord:
    """Convert a deserialized DynamoDB item into a ``SecretRecord``.

    Raises:
        StoreError: If attributes are missing or not decodable.
    """
    missing = [attr for attr in _REQUIRED_ATTRIBUTES if attr not in item]
    if missing:
        raise StoreError(
            f"Malformed credstash record {item.get('name')!r}: "
            f"missing {', '.join(missing)}"
        )
    name = str(item["name"])
    version = str(item["version"])
    try:
        wrapped_key = base64.b64decode(_as_text(item["key"]), validate=True)
        ciphertext = base64.b64decode(_as_text(item["contents"]), validate=True)
        hmac_digest = _as_text(item["hmac"])
    except (binascii.Error, ValueError) as err:
        raise StoreError(
            f"Malformed credstash record {name!r} version {version!r}: {err}"
        ) from None
    return SecretRecord(
        name=name,
        version=version,
        wrapped_key=wrapped_key,
        ciphertext=ciphertext,
        hmac_digest=hmac_digest,
    )


class DynamoDBSecretStore(SecretStore):
    """Reads credstash records through a boto3 DynamoDB service resource."""

    def __init__(self, dynamodb: Any):
        """
        Args:
            dynamodb: ``boto3.resource("dynamodb")`` or any object exposing
                      ``Table(name)`` with the same query/get_item API.
        """
        self._dynamodb = dynamodb

    def _query_all(self, table: Any, name: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        params: dict[str, Any] = {
            "KeyConditionExpression": Key("name").eq(name),
            "ConsistentRead": True,
        }
        while True:
            response = table.query(**params)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            params["ExclusiveStartKey"] = last_key

    def get_record(self, name: str, version: str, table: str) -> SecretRecord:
        """Fetch a secret record by name and optional version.

        Args:
            name: Secret name (partition key).
            version: Exact zero-padded version, or "" for the latest.
            table: DynamoDB table name.

        Returns:
            The matching ``SecretRecord``.

        Raises:
            SecretNotFound: If the name (or name+version) has no record.
            StoreError: If DynamoDB rejects the read or the item is malformed.
        """
        ddb_table = self._dynamodb.Table(table)
        try:
            if version:
                response = ddb_table.get_item(
                    Key={"name": name, "version": version},
                    ConsistentRead=True,
                )
                item = response.get("Item")
            else:
                item = latest_version(self._query_all(ddb_table, name))
        except ClientError as err:
            code = err.response.get("Error", {}).get("Code")
            raise StoreError(
                f"Unable to read secret {name!r} from table {table!r}: {code}",
                code=code,
            ) from err
        except BotoCoreError as err:
            code = type(err).__name__
            raise StoreError(
                f"Unable to reach table {table!r} for secret {name!r}: {code}",
                code=code,
            ) from err
        if item is None:
            raise SecretNotFound(name, version, table)
        record = record_from_item(item)
        logger.debug(
            "Fetched secret=%s version=%s from table=%s",
            record.name, record.version, table,
        )
        return record
