import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from eth_typing import ChecksumAddress

from custody_signer.config import AwsKmsConfig
from custody_signer.exceptions import KeyNotFoundError, SigningError
from custody_signer.normalization import normalize_signature
from custody_signer.providers.base import SignerProvider
from custody_signer.registry import clients
from custody_signer.types.ethereum_types import NormalizedSignature
from custody_signer.utils import extract_public_key_bytes_from_der, public_key_to_address, to_digest

logger = logging.getLogger(__name__)

SIGNING_ALGORITHM = "ECDSA_SHA_256"


def _create_client(config: AwsKmsConfig):
    """Create AWS KMS client."""
    return boto3.client(
        "kms",
        region_name=config.region,
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.secret_access_key,
    )


def _close_client(client) -> None:
    client.close()


class AwsKmsProvider(SignerProvider):
    """AWS KMS implementation.

    Requires an asymmetric ``ECC_SECG_P256K1`` key. Keys are addressed by
    key id, ARN or alias.
    """

    def __init__(self, config: AwsKmsConfig, client=None):
        self.config = config
        if client is None:
            client = clients.get_or_create(config.client_key(), lambda: _create_client(config), _close_client)
        self.client = client
        self._public_key: bytes | None = None
        self._address: ChecksumAddress | None = None

    @property
    def public_key(self) -> bytes:
        """Get the raw 64-byte public key from KMS."""
        if self._public_key is None:
            try:
                response = self.client.get_public_key(KeyId=self.config.key_id)
            except (BotoCoreError, ClientError) as e:
                msg = f"Failed to get public key: {e!s}"
                raise KeyNotFoundError(msg) from e
            if not response.get("PublicKey"):
                msg = "AWS KMS: Unable to retrieve Public Key"
                raise KeyNotFoundError(msg)

            self._public_key = extract_public_key_bytes_from_der(response["PublicKey"])
            logger.info(f"Loaded public key for {self.config.key_id}")
        return self._public_key

    @property
    def address(self) -> ChecksumAddress:
        """Get Ethereum address derived from the KMS public key."""
        if self._address is None:
            self._address = public_key_to_address(self.public_key)
        return self._address

    def sign_digest(self, digest: bytes) -> NormalizedSignature:
        msg_hash = to_digest(digest)
        try:
            response = self.client.sign(
                KeyId=self.config.key_id,
                Message=msg_hash,
                MessageType="DIGEST",
                SigningAlgorithm=SIGNING_ALGORITHM,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"AWS KMS signing failed: {e}")
            msg = f"Failed to sign digest: {e!s}"
            raise SigningError(msg) from e

        if not response.get("Signature"):
            msg = "AWS KMS: Signing failed"
            raise SigningError(msg)

        return normalize_signature(bytes(response["Signature"]), msg_hash, self.address)
