from eth_account import Account
from eth_keys import KeyAPI
from eth_typing import ChecksumAddress
from eth_utils import to_bytes

from custody_signer.config import DEFAULT_ACCOUNT_PATH
from custody_signer.providers.base import SignerProvider
from custody_signer.types.ethereum_types import NormalizedSignature
from custody_signer.utils import to_digest


class LocalKeyProvider(SignerProvider):
    """Private key held in process memory, for development and tests."""

    def __init__(self, private_key: str | bytes):
        if isinstance(private_key, str):
            private_key = to_bytes(hexstr=private_key)
        self._key = KeyAPI().PrivateKey(private_key)
        self._address = self._key.public_key.to_checksum_address()

    @classmethod
    def from_mnemonic(cls, mnemonic: str, account_path: str = DEFAULT_ACCOUNT_PATH) -> "LocalKeyProvider":
        """Derive the key at ``account_path`` from a BIP-39 mnemonic."""
        Account.enable_unaudited_hdwallet_features()
        account = Account.from_mnemonic(mnemonic, account_path=account_path)
        return cls(bytes(account.key))

    @property
    def address(self) -> ChecksumAddress:
        return self._address

    def sign_digest(self, digest: bytes) -> NormalizedSignature:
        # eth-keys already signs in low-S form with a known recovery id
        signature = self._key.sign_msg_hash(to_digest(digest))
        return NormalizedSignature(
            v=signature.v + 27,
            r=signature.r.to_bytes(32, "big"),
            s=signature.s.to_bytes(32, "big"),
        )
