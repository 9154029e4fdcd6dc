import hashlib
from unittest.mock import MagicMock

import ecdsa
import pytest
from ecdsa.util import sigdecode_der, sigencode_der
from eth_account.messages import _hash_eip191_message, encode_defunct
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from google.cloud import kms

from custody_signer.config import AwsKmsConfig, GcpKmsConfig
from custody_signer.providers.aws import AwsKmsProvider
from custody_signer.providers.google import GoogleKmsProvider
from custody_signer.providers.local import LocalKeyProvider

# Test Constants
# Well-known development key (first hardhat/anvil account)
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER_ADDRESS = "0x0000000000000000000000000000000000000001"

TEST_MESSAGE = "Hello Ethereum!"
TEST_DIGEST = bytes.fromhex("1234567890abcdef" * 4)

TEST_GCP_ENV = {
    "project_id": "test-project",
    "location_id": "global",
    "key_ring_id": "test-ring",
    "key_id": "test-key",
}
TEST_KEY_PATH = "projects/test-project/locations/global/keyRings/test-ring/cryptoKeys/test-key/cryptoKeyVersions/1"

SECP256K1_N = ecdsa.SECP256k1.order


def encode_der(r: int, s: int) -> bytes:
    """Minimal DER encoding of (r, s)."""
    return sigencode_der(r, s, SECP256K1_N)


class KmsKey:
    """secp256k1 key that signs the way a cloud KMS does: DER output, no recovery id."""

    def __init__(self, private_key: str = TEST_PRIVATE_KEY):
        self.signing_key = ecdsa.SigningKey.from_string(bytes.fromhex(private_key[2:]), curve=ecdsa.SECP256k1)
        self.high_s = False

    @property
    def verifying_key(self) -> ecdsa.VerifyingKey:
        return self.signing_key.get_verifying_key()

    def sign(self, digest: bytes) -> bytes:
        der = self.signing_key.sign_digest_deterministic(digest, hashfunc=hashlib.sha256, sigencode=sigencode_der)
        if not self.high_s:
            return der
        r, s = sigdecode_der(der, SECP256K1_N)
        if s <= SECP256K1_N // 2:
            s = SECP256K1_N - s
        return encode_der(r, s)


@pytest.fixture
def kms_key() -> KmsKey:
    return KmsKey()


@pytest.fixture
def test_address() -> ChecksumAddress:
    return to_checksum_address(TEST_ADDRESS)


@pytest.fixture
def message_digest() -> bytes:
    """EIP-191 hash of the test message."""
    return _hash_eip191_message(encode_defunct(text=TEST_MESSAGE))


@pytest.fixture
def gcp_config() -> GcpKmsConfig:
    return GcpKmsConfig(**TEST_GCP_ENV)


@pytest.fixture
def mock_kms_client(kms_key: KmsKey) -> MagicMock:
    """Create a mock GCP KMS client backed by a real key."""
    mock_client = MagicMock(spec=kms.KeyManagementServiceClient)

    mock_public_key_response = MagicMock()
    mock_public_key_response.pem = kms_key.verifying_key.to_pem().decode()
    mock_client.get_public_key.return_value = mock_public_key_response

    def asymmetric_sign(request):
        response = MagicMock()
        response.signature = kms_key.sign(request["digest"]["sha256"])
        return response

    mock_client.asymmetric_sign.side_effect = asymmetric_sign
    return mock_client


@pytest.fixture
def gcp_provider(gcp_config: GcpKmsConfig, mock_kms_client: MagicMock) -> GoogleKmsProvider:
    return GoogleKmsProvider(gcp_config, client=mock_kms_client)


@pytest.fixture
def aws_config() -> AwsKmsConfig:
    return AwsKmsConfig(key_id="alias/test-key")


@pytest.fixture
def mock_aws_client(kms_key: KmsKey) -> MagicMock:
    """Create a mock boto3 KMS client backed by a real key."""
    mock_client = MagicMock()
    mock_client.get_public_key.return_value = {"PublicKey": kms_key.verifying_key.to_der()}
    mock_client.sign.side_effect = lambda **kwargs: {"Signature": kms_key.sign(kwargs["Message"])}
    return mock_client


@pytest.fixture
def aws_provider(aws_config: AwsKmsConfig, mock_aws_client: MagicMock) -> AwsKmsProvider:
    return AwsKmsProvider(aws_config, client=mock_aws_client)


@pytest.fixture
def local_provider() -> LocalKeyProvider:
    return LocalKeyProvider(TEST_PRIVATE_KEY)
