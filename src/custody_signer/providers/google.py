import logging

from eth_typing import ChecksumAddress
from google.api_core.exceptions import GoogleAPIError
from google.cloud import kms

from custody_signer.config import GcpKmsConfig
from custody_signer.exceptions import KeyNotFoundError, SigningError
from custody_signer.normalization import normalize_signature
from custody_signer.providers.base import SignerProvider
from custody_signer.registry import clients
from custody_signer.types.ethereum_types import NormalizedSignature
from custody_signer.utils import extract_public_key_bytes, public_key_to_address, to_digest

logger = logging.getLogger(__name__)


def _create_client(config: GcpKmsConfig) -> kms.KeyManagementServiceClient:
    """Create Google Cloud KMS client."""
    if config.service_account_path:
        return kms.KeyManagementServiceClient.from_service_account_json(config.service_account_path)
    return kms.KeyManagementServiceClient()


def _close_client(client: kms.KeyManagementServiceClient) -> None:
    client.transport.close()


class GoogleKmsProvider(SignerProvider):
    """Google Cloud KMS implementation.

    The key version must be an ``EC_SIGN_SECP256K1_SHA256`` key. The keccak
    digest is submitted in the request's ``sha256`` slot; KMS signs the 32
    bytes as given.
    """

    def __init__(self, config: GcpKmsConfig, client: kms.KeyManagementServiceClient | None = None):
        self.config = config
        self.key_path = config.key_version_path
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
                response = self.client.get_public_key(request={"name": self.key_path})
            except GoogleAPIError as e:
                msg = f"Failed to get public key: {e!s}"
                raise KeyNotFoundError(msg) from e
            if not response.pem:
                msg = f"No PEM data for {self.key_path}"
                raise KeyNotFoundError(msg)

            self._public_key = extract_public_key_bytes(response.pem)
            logger.info(f"Loaded public key for {self.key_path}")
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
            response = self.client.asymmetric_sign(request={"name": self.key_path, "digest": {"sha256": msg_hash}})
        except GoogleAPIError as e:
            logger.error(f"GCP KMS signing failed: {e}")
            msg = f"Failed to sign digest: {e!s}"
            raise SigningError(msg) from e

        if not response or not response.signature:
            msg = "GCP KMS: Signing failed"
            raise SigningError(msg)

        return normalize_signature(bytes(response.signature), msg_hash, self.address)
