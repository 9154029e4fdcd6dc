from abc import ABC, abstractmethod

from eth_typing import ChecksumAddress

from custody_signer.types.ethereum_types import NormalizedSignature


class SignerProvider(ABC):
    """Base class for key custody backends.

    A backend only has to know its address and how to sign a 32-byte digest.
    Message, typed-data and transaction hashing live in the account layer.
    """

    @property
    @abstractmethod
    def address(self) -> ChecksumAddress:
        """Get the Ethereum address of the backend's key."""
        pass

    @abstractmethod
    def sign_digest(self, digest: bytes) -> NormalizedSignature:
        """Sign a 32-byte digest, returning a canonical (r, s, v) signature."""
        pass

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address})"
