from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, Field, field_validator

from custody_signer.utils import SECP256K1_HALF_N

WORD_LENGTH: int = 32
SIGNATURE_LENGTH: int = 65


class Signature(BaseModel):
    """Represents an Ethereum signature with v, r, s components."""

    v: int = Field(..., description="Recovery identifier")
    r: bytes = Field(..., description="R component of signature")
    s: bytes = Field(..., description="S component of signature")

    @field_validator("r", "s")
    @classmethod
    def validate_length(cls, v: bytes) -> bytes:
        if len(v) != WORD_LENGTH:
            msg = f"Length must be 32 bytes, got {len(v)} bytes"
            raise ValueError(msg)
        return v

    @field_validator("v")
    @classmethod
    def validate_v(cls, v: int) -> int:
        if v < 0:
            msg = "v must be non-negative"
            raise ValueError(msg)
        return v

    @property
    def vrs(self) -> tuple[int, int, int]:
        return self.v, int.from_bytes(self.r, "big"), int.from_bytes(self.s, "big")

    def to_hex(self) -> str:
        """Convert signature to hex string."""
        return "0x" + (self.r + self.s + bytes([self.v])).hex()

    @classmethod
    def from_hex(cls, hex_str: str) -> "Signature":
        """Create signature from hex string."""
        if hex_str.startswith("0x"):
            hex_str = hex_str[2:]
        sig_bytes = bytes.fromhex(hex_str)
        if len(sig_bytes) != SIGNATURE_LENGTH:
            msg = f"Invalid signature length: {len(sig_bytes)}"
            raise ValueError(msg)
        return cls(v=sig_bytes[64], r=sig_bytes[0:32], s=sig_bytes[32:64])


class NormalizedSignature(Signature):
    """Canonical signature: low-S form with ``v`` in {27, 28}."""

    @field_validator("v")
    @classmethod
    def validate_recovery_id(cls, v: int) -> int:
        if v not in (27, 28):
            msg = f"v must be 27 or 28, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("s")
    @classmethod
    def validate_low_s(cls, v: bytes) -> bytes:
        if int.from_bytes(v, "big") > SECP256K1_HALF_N:
            msg = "s must be in the lower half of the curve order"
            raise ValueError(msg)
        return v

    @property
    def recovery_id(self) -> int:
        return self.v - 27


class Transaction(BaseModel):
    """Represents a legacy Ethereum transaction."""

    chain_id: int | None = Field(None, description="Chain ID")
    nonce: int = Field(..., ge=0, description="Transaction nonce")
    gas_price: int = Field(..., gt=0, description="Gas price in Wei")
    gas_limit: int = Field(..., gt=0, description="Gas limit")
    to: str = Field(..., description="Recipient address")
    value: int = Field(..., ge=0, description="Transaction value in Wei")
    data: str = Field("0x", description="Transaction data")
    from_: str | None = Field(None, alias="from", description="Sender address")

    @field_validator("to", "from_")
    @classmethod
    def validate_address(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not is_address(v):
            msg = "Invalid Ethereum address"
            raise ValueError(msg)
        return to_checksum_address(v)

    @field_validator("data")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        if not v.startswith("0x"):
            v = "0x" + v
        try:
            bytes.fromhex(v[2:])
        except ValueError as error:
            msg = "Invalid hex string"
            raise ValueError(msg) from error
        return v

    def to_dict(self) -> dict:
        """Convert transaction to the dictionary format used by eth-account."""
        tx_dict = {
            "nonce": self.nonce,
            "gasPrice": self.gas_price,
            "gas": self.gas_limit,
            "to": self.to,
            "value": self.value,
            "data": self.data,
        }
        if self.chain_id is not None:
            tx_dict["chainId"] = self.chain_id
        if self.from_:
            tx_dict["from"] = self.from_
        return tx_dict

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """
        Create transaction from an eth-account style dictionary.

        Args:
            data: Transaction data dictionary, camelCase or snake_case keys

        Returns:
            Transaction: A new transaction instance

        Raises:
            ValueError: If required fields are missing or invalid
        """
        tx_data = data.copy()

        if "from" in tx_data:
            tx_data["from_"] = tx_data.pop("from")
        if "gas" in tx_data:
            tx_data["gas_limit"] = tx_data.pop("gas")
        if "gasPrice" in tx_data:
            tx_data["gas_price"] = tx_data.pop("gasPrice")
        if "chainId" in tx_data:
            tx_data["chain_id"] = tx_data.pop("chainId")

        return cls(**tx_data)

    class Config:
        populate_by_name = True
