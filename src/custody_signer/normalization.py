"""Normalization of KMS signatures into Ethereum ``(r, s, v)`` form.

KMS backends return DER signatures without a recovery identifier. This module
decodes them, rewrites ``s`` into its low-S form (EIP-2) and finds the ``v``
that recovers the account's address.
"""

import logging
from collections.abc import Callable

from eth_typing import Hash32

from custody_signer.der import decode_der_signature
from custody_signer.exceptions import RecoveryFailure, ScalarOutOfRange
from custody_signer.types.ethereum_types import NormalizedSignature
from custody_signer.utils import (
    SECP256K1_HALF_N,
    SECP256K1_N,
    normalize_address,
    recover_address,
    to_digest,
)

logger = logging.getLogger(__name__)

WORD_LENGTH = 32

# Tried in this order; a match at 27 never looks at 28.
RECOVERY_CANDIDATES = (27, 28)

RecoverFn = Callable[[Hash32, bytes, bytes, int], str]


def normalize_s(s: int) -> int:
    """Return the low-S representative of ``s`` (EIP-2)."""
    if s > SECP256K1_HALF_N:
        return SECP256K1_N - s
    return s


def to_word(value: int) -> bytes:
    """Encode ``value`` as a left-zero-padded 32-byte big-endian word."""
    return value.to_bytes(WORD_LENGTH, "big")


def resolve_v(
    digest: Hash32,
    r: bytes,
    s: bytes,
    expected_address: str | bytes,
    recover: RecoverFn = recover_address,
) -> NormalizedSignature:
    """
    Find the recovery identifier that reproduces ``expected_address``.

    Args:
        digest: 32-byte hash that was signed
        r: 32-byte ``r`` word
        s: 32-byte canonical ``s`` word
        expected_address: Address the signature must recover to, any case
        recover: Recovery primitive ``(digest, r, s, v) -> address``

    Returns:
        NormalizedSignature: ``r``, ``s`` and the matching ``v``

    Raises:
        RecoveryFailure: Neither 27 nor 28 recovers ``expected_address``
    """
    expected = normalize_address(expected_address)
    recovered = []

    for v in RECOVERY_CANDIDATES:
        address = recover(digest, r, s, v)
        if normalize_address(address) == expected:
            logger.debug(f"Recovered {address} with v={v}")
            return NormalizedSignature(v=v, r=r, s=s)
        recovered.append(address)

    if isinstance(expected_address, bytes | bytearray):
        expected_address = expected
    raise RecoveryFailure(expected_address, *recovered)


def normalize_signature(
    der_signature: bytes,
    digest: bytes | str,
    expected_address: str | bytes,
    recover: RecoverFn = recover_address,
) -> NormalizedSignature:
    """
    Convert a DER signature from a KMS backend into a canonical ``(r, s, v)``.

    Args:
        der_signature: DER-encoded ECDSA signature
        digest: The 32-byte hash the backend signed, as bytes or hex
        expected_address: Address of the signing key, compared case-insensitively
        recover: Recovery primitive, ``recover_address`` by default

    Returns:
        NormalizedSignature: Fixed-width ``r`` and low-S ``s`` with ``v`` in {27, 28}

    Raises:
        MalformedSignature: The DER input is not a valid signature structure
        RecoveryFailure: No recovery identifier matches ``expected_address``

    Example:
        >>> signature = normalize_signature(response.signature, msg_hash, account.address)
        >>> signature.to_hex()
    """
    msg_hash = to_digest(digest)
    parsed = decode_der_signature(der_signature)

    for name, value in (("r", parsed.r), ("s", parsed.s)):
        if value >= SECP256K1_N:
            raise ScalarOutOfRange(f"Invalid DER: {name} is not below the curve order")

    s = normalize_s(parsed.s)
    if s != parsed.s:
        logger.debug("Replaced high s with its low-S form")

    return resolve_v(msg_hash, to_word(parsed.r), to_word(s), expected_address, recover)
