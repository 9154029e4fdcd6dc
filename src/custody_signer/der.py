"""Minimal DER decoder for ECDSA-Sig-Value structures.

Cloud KMS backends return ECDSA signatures as::

    Signature ::= SEQUENCE {
      r INTEGER,
      s INTEGER
    }

Only this shape is accepted. The outer SEQUENCE length is skipped rather than
checked against the content, bounds are enforced on each INTEGER instead, and
trailing bytes after ``s`` are ignored.
"""

from dataclasses import dataclass

from custody_signer.exceptions import (
    IntegerOutOfBounds,
    LengthOutOfBounds,
    MissingInteger,
    MissingSequence,
    UnexpectedEnd,
)

SEQUENCE_TAG = 0x30
INTEGER_TAG = 0x02
LONG_FORM_FLAG = 0x80


@dataclass(frozen=True)
class ParsedSignature:
    """The ``r`` and ``s`` integers of a decoded DER signature."""

    r: int
    s: int


class _Cursor:
    """Read position over a DER buffer."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def read_byte(self) -> int:
        if self.offset >= len(self.data):
            raise UnexpectedEnd()
        byte = self.data[self.offset]
        self.offset += 1
        return byte

    def skip(self, count: int) -> None:
        self.offset += count
        if self.offset > len(self.data):
            raise LengthOutOfBounds()

    def read_length(self) -> int:
        length = self.read_byte()
        if length & LONG_FORM_FLAG:
            count = length & 0x7F
            length = 0
            for _ in range(count):
                length = (length << 8) | self.read_byte()
        return length

    def read_integer(self) -> int:
        if self.read_byte() != INTEGER_TAG:
            raise MissingInteger()

        length = self.read_length()
        start = self.offset
        end = start + length
        if end > len(self.data):
            raise IntegerOutOfBounds()
        self.offset = end

        # A leading 0x00 sign pad adds nothing to the unsigned value.
        return int.from_bytes(self.data[start:end], "big")


def decode_der_signature(der: bytes) -> ParsedSignature:
    """
    Decode a DER-encoded ECDSA signature into its ``r`` and ``s`` integers.

    Args:
        der: DER bytes as returned by the KMS backend

    Returns:
        ParsedSignature: The unsigned ``r`` and ``s`` values

    Raises:
        MalformedSignature: One of its subclasses for the first structural violation found
    """
    cursor = _Cursor(bytes(der))

    if cursor.read_byte() != SEQUENCE_TAG:
        raise MissingSequence()

    length = cursor.read_byte()
    if length & LONG_FORM_FLAG:
        cursor.skip(length & 0x7F)

    r = cursor.read_integer()
    s = cursor.read_integer()
    return ParsedSignature(r=r, s=s)
