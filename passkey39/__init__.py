"""Deterministic private keys regenerated from passkey signatures."""

from .core import (
    DEFAULT_CHALLENGE,
    KEY_LENGTH,
    PrivateKey,
    build_challenge,
    derive_key,
    entropy_to_mnemonic,
    is_valid_mnemonic,
    mnemonic_to_entropy,
)
from .errors import (
    AuthenticatorError,
    DerivationFailure,
    InvalidInput,
    Passkey39Error,
    UnsupportedEnvironment,
)
from .passkey import Passkey39

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CHALLENGE",
    "KEY_LENGTH",
    "AuthenticatorError",
    "DerivationFailure",
    "InvalidInput",
    "Passkey39",
    "Passkey39Error",
    "PrivateKey",
    "UnsupportedEnvironment",
    "build_challenge",
    "derive_key",
    "entropy_to_mnemonic",
    "is_valid_mnemonic",
    "mnemonic_to_entropy",
]
