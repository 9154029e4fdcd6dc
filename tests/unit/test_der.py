"""Unit tests for the DER signature decoder."""
import pytest
from conftest import SECP256K1_N, TEST_DIGEST, KmsKey, encode_der
from ecdsa.util import sigdecode_der

from custody_signer.der import ParsedSignature, decode_der_signature
from custody_signer.exceptions import (
    IntegerOutOfBounds,
    LengthOutOfBounds,
    MalformedSignature,
    MissingInteger,
    MissingSequence,
    UnexpectedEnd,
)

HIGH_BIT_R = int("b3c2fef0472f76bfcbd4f142a2d32e0ca8eaf72e2c5039f27935aaa416f10857", 16)
LOW_BIT_S = int("3e2629df516b30b71438d4c8459b1ad279416d3e38bcc3f487038a9468471842", 16)


def test_decode_kms_signature(kms_key: KmsKey):
    """Test decoding recovers the exact (r, s) of an independently encoded signature."""
    der = kms_key.sign(TEST_DIGEST)
    r, s = sigdecode_der(der, SECP256K1_N)

    assert decode_der_signature(der) == ParsedSignature(r=r, s=s)


def test_decode_strips_sign_padding():
    """Test that the 0x00 pad before a high-bit integer adds no value."""
    der = encode_der(HIGH_BIT_R, LOW_BIT_S)
    assert der[3] == 0x21
    assert der[4] == 0x00

    parsed = decode_der_signature(der)
    assert parsed.r == HIGH_BIT_R
    assert parsed.s == LOW_BIT_S


def test_decode_short_integers():
    """Test integers shorter than 32 bytes."""
    parsed = decode_der_signature(bytes.fromhex("3006020101020102"))
    assert parsed == ParsedSignature(r=1, s=2)


def test_decode_accepts_bytearray_and_memoryview():
    der = encode_der(HIGH_BIT_R, LOW_BIT_S)
    assert decode_der_signature(bytearray(der)) == decode_der_signature(der)
    assert decode_der_signature(memoryview(der)) == decode_der_signature(der)


def test_decode_long_form_sequence_length():
    """Test a long-form outer length is skipped."""
    body = bytes.fromhex("020101020102")
    der = bytes([0x30, 0x81, len(body)]) + body
    assert decode_der_signature(der) == ParsedSignature(r=1, s=2)


def test_decode_long_form_integer_length():
    """Test long-form integer lengths are decoded."""
    r_bytes = HIGH_BIT_R.to_bytes(32, "big")
    body = bytes([0x02, 0x81, len(r_bytes)]) + r_bytes + bytes.fromhex("020105")
    der = bytes([0x30, 0x81, len(body)]) + body

    assert decode_der_signature(der) == ParsedSignature(r=HIGH_BIT_R, s=5)


def test_decode_ignores_trailing_bytes():
    der = encode_der(HIGH_BIT_R, LOW_BIT_S) + b"\xde\xad\xbe\xef"
    assert decode_der_signature(der) == ParsedSignature(r=HIGH_BIT_R, s=LOW_BIT_S)


def test_missing_sequence():
    """Test a buffer not starting with the SEQUENCE tag."""
    with pytest.raises(MissingSequence, match="Invalid DER: Missing Sequence"):
        decode_der_signature(bytes([0x00, 0x02, 0x01, 0x01]))


def test_missing_integer():
    """Test a sequence whose element is not an INTEGER."""
    with pytest.raises(MissingInteger, match="Invalid DER: Missing Integer"):
        decode_der_signature(bytes([0x30, 0x04, 0x00, 0x01, 0x01, 0x01]))


def test_missing_second_integer():
    """Test that the tag of s is checked as well."""
    with pytest.raises(MissingInteger):
        decode_der_signature(bytes.fromhex("3006020101040102"))


@pytest.mark.parametrize(
    "der",
    [
        b"",
        bytes([0x30]),
        bytes([0x30, 0x06]),
        bytes.fromhex("3006020101"),
        bytes.fromhex("300602010102"),
        bytes.fromhex("30060281"),
    ],
)
def test_unexpected_end(der: bytes):
    """Test truncated buffers."""
    with pytest.raises(UnexpectedEnd, match="Invalid DER: Unexpected end of data"):
        decode_der_signature(der)


def test_truncated_signature_from_kms(kms_key: KmsKey):
    der = kms_key.sign(TEST_DIGEST)
    r_end = 4 + der[3]

    with pytest.raises(UnexpectedEnd):
        decode_der_signature(der[:r_end])


def test_long_form_length_out_of_bounds():
    with pytest.raises(LengthOutOfBounds, match="Invalid DER: Length out of bounds"):
        decode_der_signature(bytes([0x30, 0x84, 0x00, 0x00]))


def test_integer_out_of_bounds():
    """Test an integer whose declared length exceeds the buffer."""
    with pytest.raises(IntegerOutOfBounds, match="Invalid DER: Integer out of bounds"):
        decode_der_signature(bytes.fromhex("3044022001020304"))


def test_errors_share_base_class():
    with pytest.raises(MalformedSignature):
        decode_der_signature(bytes([0x31, 0x00]))
