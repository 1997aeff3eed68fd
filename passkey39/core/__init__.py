"""Deterministic challenge construction and signature-to-key derivation."""

from .challenge import DEFAULT_CHALLENGE, build_challenge
from .kdf import KEY_LENGTH, derive_key
from .private_key import PrivateKey, entropy_to_mnemonic, is_valid_mnemonic, mnemonic_to_entropy

__all__ = [
    "DEFAULT_CHALLENGE",
    "KEY_LENGTH",
    "PrivateKey",
    "build_challenge",
    "derive_key",
    "entropy_to_mnemonic",
    "is_valid_mnemonic",
    "mnemonic_to_entropy",
]
