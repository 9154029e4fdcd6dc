"""Cryptographic utilities."""

import ecdsa
from eth_keys import KeyAPI
from eth_typing import ChecksumAddress, Hash32
from eth_utils import to_bytes

# secp256k1 curve order
SECP256K1_N = int("fffffffffffffffffffffffffffffffebaaedce6af48a03bbfd25e8cd0364141", 16)
SECP256K1_HALF_N = SECP256K1_N // 2

DIGEST_LENGTH = 32
RAW_PUBLIC_KEY_LENGTH = 64

keys = KeyAPI()


def to_digest(digest: bytes | str) -> Hash32:
    """Coerce a 32-byte digest given as bytes or a hex string."""
    if isinstance(digest, str):
        digest = to_bytes(hexstr=digest)
    digest = bytes(digest)
    if len(digest) != DIGEST_LENGTH:
        msg = f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)} bytes"
        raise ValueError(msg)
    return Hash32(digest)


def normalize_address(address: str | bytes) -> str:
    """Lower-case hex form of an address, for case-insensitive comparison."""
    if isinstance(address, bytes | bytearray):
        return "0x" + bytes(address).hex()
    return address.lower()


def public_key_to_address(raw_public_key: bytes) -> ChecksumAddress:
    """Derive the checksum address of a 64-byte uncompressed public key."""
    return keys.PublicKey(raw_public_key).to_checksum_address()


def extract_public_key_bytes(pem: str | bytes) -> bytes:
    """Extract the raw 64-byte secp256k1 public key from a PEM SubjectPublicKeyInfo."""
    verifying_key = ecdsa.VerifyingKey.from_pem(pem)
    return _raw_secp256k1_key(verifying_key)


def extract_public_key_bytes_from_der(der: bytes) -> bytes:
    """Extract the raw 64-byte secp256k1 public key from a DER SubjectPublicKeyInfo."""
    verifying_key = ecdsa.VerifyingKey.from_der(der)
    return _raw_secp256k1_key(verifying_key)


def _raw_secp256k1_key(verifying_key: ecdsa.VerifyingKey) -> bytes:
    if verifying_key.curve != ecdsa.SECP256k1:
        msg = f"Expected a secp256k1 key, got {verifying_key.curve.name}"
        raise ValueError(msg)
    return verifying_key.to_string("raw")


def recover_address(digest: Hash32, r: bytes, s: bytes, v: int) -> ChecksumAddress:
    """
    Recover the signer address of ``(r, s, v)`` over ``digest``.

    ``v`` is the Ethereum-style 27/28 value. Invalid signatures raise
    ``eth_keys.exceptions.BadSignature`` instead of returning an address.
    """
    signature = keys.Signature(vrs=(v - 27, int.from_bytes(r, "big"), int.from_bytes(s, "big")))
    return signature.recover_public_key_from_msg_hash(digest).to_checksum_address()
