"""Signature-to-key derivation.

A single HKDF-SHA256 pass turns an authenticator signature into key material:
the signature is the input key material, the UTF-8 challenge is the salt and
the UTF-8 relying-party name is the context label.  Identical inputs always
produce identical output; nothing is cached or retried.
"""

from __future__ import annotations

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..errors import DerivationFailure, InvalidInput

KEY_LENGTH = 32


def _normalise_inputs(signature: bytes, challenge: str, rp_name: str, length: int) -> tuple[bytes, bytes, bytes]:
    if not isinstance(signature, (bytes, bytearray, memoryview)) or len(signature) == 0:
        raise InvalidInput("Signature must be non-empty bytes")
    if not isinstance(challenge, str) or not challenge:
        raise InvalidInput("Challenge must be a non-empty string")
    if not isinstance(rp_name, str):
        raise InvalidInput("Relying-party name must be a string")
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise InvalidInput("Requested key length must be a positive integer")
    return bytes(signature), challenge.encode("utf-8"), rp_name.encode("utf-8")


def derive_key(signature: bytes, challenge: str, rp_name: str, *, length: int = KEY_LENGTH) -> bytes:
    """Derive ``length`` bytes of key material from ``signature``.

    Args:
        signature: Raw signature returned by the authenticator ceremony.
        challenge: The exact challenge string the ceremony signed.
        rp_name: Relying-party name, used as the HKDF info label.
        length: Number of output bytes.

    Raises:
        InvalidInput: An input is empty or ``length`` is not positive.
        DerivationFailure: HKDF refused the parameters.
    """

    ikm, salt, info = _normalise_inputs(signature, challenge, rp_name, length)
    try:
        hkdf = HKDF(algorithm=hashes.SHA256(), length=length, salt=salt, info=info)
        return hkdf.derive(ikm)
    except (ValueError, TypeError) as exc:
        raise DerivationFailure(f"HKDF-SHA256 cannot derive {length} bytes") from exc


__all__ = [
    "KEY_LENGTH",
    "derive_key",
]
