class SignerError(Exception):
    """Base exception for custody signer operations."""

    pass


class SignatureError(SignerError):
    """Error in a signature produced by a backend."""

    pass


class MalformedSignature(SignatureError):
    """DER signature is not a well-formed two-integer sequence."""

    reason = "Malformed signature"

    def __init__(self, msg: str | None = None):
        super().__init__(msg or f"Invalid DER: {self.reason}")


class MissingSequence(MalformedSignature):
    reason = "Missing Sequence"


class UnexpectedEnd(MalformedSignature):
    reason = "Unexpected end of data"


class LengthOutOfBounds(MalformedSignature):
    reason = "Length out of bounds"


class MissingInteger(MalformedSignature):
    reason = "Missing Integer"


class IntegerOutOfBounds(MalformedSignature):
    reason = "Integer out of bounds"


class ScalarOutOfRange(MalformedSignature):
    reason = "Scalar out of range"


class RecoveryFailure(SignatureError):
    """Neither recovery identifier reproduces the expected address."""

    def __init__(self, expected: str, recovered_at_27: str, recovered_at_28: str):
        self.expected = expected
        self.recovered_at_27 = recovered_at_27
        self.recovered_at_28 = recovered_at_28
        super().__init__(
            f"Signature recovery failed. Expected: {expected}, Got: {recovered_at_27} / {recovered_at_28}"
        )


class SigningError(SignerError):
    """Error during signature operations."""

    pass


class KeyNotFoundError(SignerError):
    """Key not found in the custody backend."""

    pass


class ConfigurationError(SignerError):
    """Invalid signer configuration."""

    pass
