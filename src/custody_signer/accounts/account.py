import logging

from eth_account._utils.legacy_transactions import (
    Transaction as LegacyTransaction,  # noqa: PLC2701
    encode_transaction,  # noqa: PLC2701
    serializable_unsigned_transaction_from_dict,  # noqa: PLC2701
)
from eth_account.messages import SignableMessage, _hash_eip191_message, encode_defunct, encode_typed_data
from eth_account.typed_transactions import TypedTransaction
from eth_typing import ChecksumAddress
from eth_utils import to_int

from custody_signer.exceptions import ConfigurationError
from custody_signer.providers.base import SignerProvider
from custody_signer.types.ethereum_types import NormalizedSignature, Signature, Transaction

logger = logging.getLogger(__name__)

MSG_HASH_LENGTH = 32


class CustodyAccount:
    """Ethereum account backed by any key custody provider."""

    def __init__(self, provider: SignerProvider):
        self.provider = provider

    @property
    def address(self) -> ChecksumAddress:
        return self.provider.address

    def sign_hash(self, msghash: bytes) -> NormalizedSignature:
        """Sign a raw 32-byte hash with the provider."""
        if len(msghash) != MSG_HASH_LENGTH:
            raise ValueError("Invalid message hash length")
        return self.provider.sign_digest(bytes(msghash))

    def sign_message(self, message: str | bytes) -> Signature:
        """
        Sign an EIP-191 personal message.

        Args:
            message: Message to sign; ``0x``-prefixed strings are read as hex

        Returns:
            Signature: The v, r, s components of the signature

        Example:
            >>> account = CustodyAccount(GoogleKmsProvider(GcpKmsConfig.from_env()))
            >>> signature = account.sign_message("Hello Ethereum!")
        """
        if isinstance(message, str):
            if message.startswith("0x"):
                signable = encode_defunct(hexstr=message)
            else:
                signable = encode_defunct(text=message)
        elif isinstance(message, bytes):
            signable = encode_defunct(primitive=message)
        else:
            raise TypeError(f"Unsupported message type: {type(message)}")

        return self._sign_signable(signable)

    def sign_typed_data(self, typed_data: dict) -> Signature:
        """Sign an EIP-712 message given as a full typed-data dictionary."""
        return self._sign_signable(encode_typed_data(full_message=typed_data))

    def _sign_signable(self, signable: SignableMessage) -> Signature:
        return self.sign_hash(_hash_eip191_message(signable))

    def sign_transaction(self, transaction: Transaction | dict) -> bytes:
        """
        Sign a transaction and encode it for broadcast.

        Legacy transactions get EIP-155 ``v`` values when they carry a
        ``chainId``; typed transactions (EIP-2930, EIP-1559) use the bare
        recovery id.

        Args:
            transaction: Transaction model or eth-account style dictionary

        Returns:
            bytes: The signed, encoded transaction

        Raises:
            ConfigurationError: If ``from`` does not match this account
        """
        tx_dict = transaction.to_dict() if isinstance(transaction, Transaction) else dict(transaction)

        sender = tx_dict.pop("from", None)
        if sender is not None and sender.lower() != self.address.lower():
            msg = f"Transaction sender {sender} does not match account {self.address}"
            raise ConfigurationError(msg)

        unsigned_tx = serializable_unsigned_transaction_from_dict(tx_dict)
        signature = self.sign_hash(unsigned_tx.hash())

        if isinstance(unsigned_tx, TypedTransaction):
            v = signature.recovery_id
        elif isinstance(unsigned_tx, LegacyTransaction):
            # unsigned EIP-155 transactions carry the chain id in v
            v = signature.recovery_id + 35 + 2 * unsigned_tx.v
        else:
            v = signature.v
        logger.debug(f"Signed transaction from {self.address} with v={v}")

        return encode_transaction(unsigned_tx, vrs=(v, to_int(signature.r), to_int(signature.s)))

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address})"
