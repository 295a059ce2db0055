"""Shared fixtures: in-memory store/KMS fakes and a record sealer."""
import base64
import os

import pytest

from credstash_reader.config import ClientConfig
from credstash_reader.crypto import compute_hmac, encrypt_data
from credstash_reader.exceptions import KeyServiceError, SecretNotFound
from credstash_reader.kms import KeyUnwrapper, split_key_material
from credstash_reader.models import SecretRecord
from credstash_reader.store import SecretStore


def seal(name, version, plaintext, key_material, wrapped_key=None):
    """Build a SecretRecord the way credstash writes one."""
    data_key, hmac_key = key_material[:32], key_material[32:]
    ciphertext = encrypt_data(plaintext, data_key)
    return SecretRecord(
        name=name,
        version=version,
        wrapped_key=wrapped_key or os.urandom(48),
        ciphertext=ciphertext,
        hmac_digest=compute_hmac(ciphertext, hmac_key).hex(),
    )


def as_item(record):
    """Render a SecretRecord as a deserialized DynamoDB item."""
    return {
        "name": record.name,
        "version": record.version,
        "key": base64.b64encode(record.wrapped_key).decode("ascii"),
        "contents": base64.b64encode(record.ciphertext).decode("ascii"),
        "hmac": record.hmac_digest,
    }


class FakeStore(SecretStore):
    """In-memory versioned table: {table: {name: {version: record}}}."""

    def __init__(self):
        self.tables = {}
        self.calls = []

    def put(self, table, record):
        self.tables.setdefault(table, {}).setdefault(record.name, {})[
            record.version
        ] = record

    def get_record(self, name, version, table):
        self.calls.append((name, version, table))
        versions = self.tables.get(table, {}).get(name, {})
        if version:
            if version not in versions:
                raise SecretNotFound(name, version, table)
            return versions[version]
        if not versions:
            raise SecretNotFound(name, version, table)
        return versions[max(versions)]


class FakeKMS(KeyUnwrapper):
    """Context-bound key service holding wrapped blob -> (context, material)."""

    def __init__(self):
        self.keys = {}
        self.calls = []

    def wrap(self, material, context=None):
        blob = os.urandom(48)
        self.keys[blob] = (dict(context or {}), material)
        return blob

    def unwrap(self, wrapped_key, context, key_id):
        self.calls.append((wrapped_key, dict(context), key_id))
        if wrapped_key not in self.keys:
            raise KeyServiceError(
                "KMS decrypt failed with InvalidCiphertextException: ",
                code="InvalidCiphertextException",
            )
        expected_context, material = self.keys[wrapped_key]
        if dict(context) != expected_context:
            raise KeyServiceError(
                "KMS decrypt failed with InvalidCiphertextException: ",
                code="InvalidCiphertextException",
            )
        return split_key_material(material)


@pytest.fixture
def key_material():
    return os.urandom(64)


@pytest.fixture
def config():
    return ClientConfig(table="credential-store", key_id="alias/credstash")


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def kms():
    return FakeKMS()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Keep boto3 offline and deterministic."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
