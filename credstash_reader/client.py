"""
SecretClient — fetch, unwrap, verify and decrypt credstash secrets.

Provides the public API:
- ``get_secret(name, table, version, context)`` — return the plaintext text
- ``get_secret_bytes(...)`` — same, without UTF-8 decoding
- ``from_config(config)`` — factory wiring DynamoDB and KMS from boto3

Security Note:
    The HMAC is verified before anything is decrypted; a record that fails
    verification never reaches the cipher. Unwrapped keys are local to one
    call and never cached.
"""
import logging
from typing import Any, Optional, Union

from .config import ClientConfig
from .crypto import decrypt_data, verify_hmac
from .exceptions import CipherError
from .kms import KeyUnwrapper, KMSKeyUnwrapper
from .models import EncryptionContext, pad_version
from .session import build_session
from .store import DynamoDBSecretStore, SecretStore

logger = logging.getLogger("credstash.reader")


class SecretClient:
    """Read-only credstash client.

    Holds only the immutable ``ClientConfig`` and its two collaborators, so
    one instance may serve concurrent ``get_secret`` calls from many threads.
    """

    def __init__(
        self,
        config: ClientConfig,
        store: SecretStore,
        unwrapper: KeyUnwrapper,
    ):
        self._config = config
        self._store = store
        self._unwrapper = unwrapper

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _resolve_version(self, version: Union[str, int, None]) -> str:
        if version is None or version == "":
            return ""
        if isinstance(version, bool):
            raise TypeError("version must be a string or an integer, not bool")
        if isinstance(version, int):
            return pad_version(version)
        return version

    def get_secret_bytes(
        self,
        name: str,
        table: str = "",
        version: Union[str, int, None] = "",
        context: Optional[EncryptionContext] = None,
    ) -> bytes:
        """Fetch and decrypt a secret, returning raw plaintext bytes.

        Args:
            name: Secret name.
            table: Table override; "" uses the configured table.
            version: Exact version (padded string or int); "" for latest.
            context: KMS encryption context the secret was stored with.

        Returns:
            Integrity-verified plaintext bytes.

        Raises:
            SecretNotFound, StoreError, KeyServiceError,
            MaterialLengthError, IntegrityError, CipherError.
        """
        if not name:
            raise ValueError("Secret name cannot be empty")
        table = table or self._config.table
        version = self._resolve_version(version)
        logger.debug(
            "Getting secret=%s version=%s table=%s",
            name, version or "<latest>", table,
        )

        record = self._store.get_record(name, version, table)
        material = self._unwrapper.unwrap(
            record.wrapped_key, context or {}, self._config.key_id,
        )
        verify_hmac(record, material.hmac_key)
        return decrypt_data(record.ciphertext, material.data_key)

    def get_secret(
        self,
        name: str,
        table: str = "",
        version: Union[str, int, None] = "",
        context: Optional[EncryptionContext] = None,
    ) -> str:
        """Fetch and decrypt a secret as text.

        Raises:
            CipherError: If the decrypted secret is not valid UTF-8.
        """
        plaintext = self.get_secret_bytes(name, table, version, context)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise CipherError(
                f"Decrypted secret {name!r} is not valid UTF-8 text"
            ) from None

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: Optional[ClientConfig] = None,
        session: Any = None,
    ) -> "SecretClient":
        """Build a client backed by DynamoDB and KMS.

        Args:
            config: Client settings; loaded from the environment if omitted.
            session: Optional pre-built boto3 session.

        Returns:
            Configured SecretClient.
        """
        if config is None:
            config = ClientConfig.from_env()
        if session is None:
            session = build_session(config)
        store = DynamoDBSecretStore(
            session.resource("dynamodb", region_name=config.region),
        )
        unwrapper = KMSKeyUnwrapper(
            session.client("kms", region_name=config.region),
        )
        logger.debug("Configured credstash for table %s", config.table)
        return cls(config, store, unwrapper)
