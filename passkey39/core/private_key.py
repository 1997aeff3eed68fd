"""Read-only views over derived key material."""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field
from functools import lru_cache

from mnemonic import Mnemonic

from ..errors import InvalidInput
from .kdf import KEY_LENGTH, derive_key

DEFAULT_LANGUAGE = "english"


@lru_cache(maxsize=None)
def _wordlist(language: str) -> Mnemonic:
    return Mnemonic(language)


def entropy_to_mnemonic(entropy: bytes, language: str = DEFAULT_LANGUAGE) -> str:
    """Encode ``entropy`` as a BIP-39 phrase with its checksum word."""

    try:
        return _wordlist(language).to_mnemonic(bytes(entropy))
    except ValueError as exc:
        raise InvalidInput(f"Cannot encode {len(entropy)} bytes as a mnemonic: {exc}") from exc


def mnemonic_to_entropy(phrase: str, language: str = DEFAULT_LANGUAGE) -> bytes:
    """Decode a BIP-39 phrase back to its entropy, verifying the checksum."""

    words = phrase.split()
    try:
        return bytes(_wordlist(language).to_entropy(words))
    except (ValueError, LookupError) as exc:
        raise InvalidInput(f"Invalid mnemonic phrase: {exc}") from exc


def is_valid_mnemonic(phrase: str, language: str = DEFAULT_LANGUAGE) -> bool:
    return _wordlist(language).check(" ".join(phrase.split()))


@dataclass(frozen=True, slots=True, eq=False)
class PrivateKey:
    """Derived key with raw, hexadecimal and mnemonic representations.

    All three representations encode the same bytes.  The key never appears in
    ``repr`` output and equality is checked in constant time.
    """

    key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.key, (bytes, bytearray)) or len(self.key) == 0:
            raise InvalidInput("Private key material must be non-empty bytes")
        object.__setattr__(self, "key", bytes(self.key))

    @classmethod
    def derive(cls, signature: bytes, challenge: str, rp_name: str, *, length: int = KEY_LENGTH) -> "PrivateKey":
        return cls(derive_key(signature, challenge, rp_name, length=length))

    @classmethod
    def from_hex(cls, value: str) -> "PrivateKey":
        try:
            return cls(bytes.fromhex(value))
        except ValueError as exc:
            raise InvalidInput("Private key hex must be an even-length hexadecimal string") from exc

    @classmethod
    def from_mnemonic(cls, phrase: str, language: str = DEFAULT_LANGUAGE) -> "PrivateKey":
        return cls(mnemonic_to_entropy(phrase, language))

    @property
    def bytes(self) -> bytes:
        return self.key

    @property
    def hex(self) -> str:
        return self.key.hex()

    @property
    def mnemonic(self) -> str:
        return entropy_to_mnemonic(self.key)

    def __len__(self) -> int:
        return len(self.key)

    def __bytes__(self) -> bytes:
        return self.key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrivateKey):
            return NotImplemented
        return hmac.compare_digest(self.key, other.key)

    def __hash__(self) -> int:
        return hash(self.key)


__all__ = [
    "DEFAULT_LANGUAGE",
    "PrivateKey",
    "entropy_to_mnemonic",
    "is_valid_mnemonic",
    "mnemonic_to_entropy",
]
