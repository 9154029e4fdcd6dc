from custody_signer.accounts import CustodyAccount
from custody_signer.exceptions import (
    MalformedSignature,
    RecoveryFailure,
    SignerError,
    SigningError,
)
from custody_signer.normalization import normalize_signature
from custody_signer.providers import SignerProvider, create_provider

__all__ = [
    "CustodyAccount",
    "MalformedSignature",
    "RecoveryFailure",
    "SignerError",
    "SignerProvider",
    "SigningError",
    "create_provider",
    "normalize_signature",
]
