"""A software authenticator producing stable Ed25519 assertions.

Credentials live in a :class:`~passkey39.authenticator.store.CredentialStore`.
Ed25519 signatures are deterministic and the signature counter is pinned to
zero, so the same credential signing the same challenge always yields the
same signature bytes.
"""

from __future__ import annotations

import hashlib
import json
import logging
import secrets
from urllib.parse import urlparse

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from fido2 import cbor

from ..errors import AuthenticatorError
from .base import COSE_ALG_EDDSA, Assertion, CreationOptions, Credential, RequestOptions, select_algorithm
from .store import CredentialStore, MemoryCredentialStore, StoredCredential, b64url_encode

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = (COSE_ALG_EDDSA,)

FLAG_USER_PRESENT = 0x01
FLAG_USER_VERIFIED = 0x04


def _check_rp_binding(rp_id: str, origin: str) -> None:
    host = urlparse(origin).hostname
    if not rp_id or host is None:
        raise AuthenticatorError(f"Cannot bind relying party {rp_id!r} to origin {origin!r}")
    if host != rp_id and not host.endswith("." + rp_id):
        raise AuthenticatorError(f"Relying party {rp_id!r} is not valid for origin {origin!r}")


def _cose_public_key(public_key: ed25519.Ed25519PublicKey) -> bytes:
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    # kty=OKP, alg=EdDSA, crv=Ed25519, x
    return cbor.encode({1: 1, 3: COSE_ALG_EDDSA, -1: 6, -2: raw})


def _client_data_json(ceremony: str, challenge: bytes, origin: str) -> bytes:
    client_data = {
        "type": ceremony,
        "challenge": b64url_encode(challenge),
        "origin": origin,
        "crossOrigin": False,
    }
    return json.dumps(client_data, separators=(",", ":")).encode("utf-8")


def _authenticator_data(rp_id: str, user_verified: bool) -> bytes:
    flags = FLAG_USER_PRESENT | (FLAG_USER_VERIFIED if user_verified else 0)
    return hashlib.sha256(rp_id.encode("utf-8")).digest() + bytes([flags]) + (0).to_bytes(4, "big")


class SoftwareAuthenticator:
    """Authenticator holding Ed25519 credentials in a credential store."""

    def __init__(self, store: CredentialStore | None = None, *, supports_user_verification: bool = True):
        self.store = store if store is not None else MemoryCredentialStore()
        self.supports_user_verification = supports_user_verification

    def is_available(self) -> bool:
        return True

    def _require_user_verification(self, policy: str) -> bool:
        if policy == "required" and not self.supports_user_verification:
            raise AuthenticatorError("User verification is required but not supported")
        return self.supports_user_verification and policy != "discouraged"

    def make_credential(self, options: CreationOptions) -> Credential:
        _check_rp_binding(options.rp_id, options.origin)
        self._require_user_verification(options.user_verification)

        algorithm = select_algorithm(options.algorithms, SUPPORTED_ALGORITHMS)
        if algorithm is None:
            raise AuthenticatorError(f"None of the requested algorithms {list(options.algorithms)} are supported")

        private_key = ed25519.Ed25519PrivateKey.generate()
        private_bytes = private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        credential_id = secrets.token_bytes(16)
        self.store.add(
            StoredCredential(
                credential_id=credential_id,
                rp_id=options.rp_id,
                user_id=options.user_id,
                user_name=options.user_name,
                display_name=options.display_name,
                private_key=private_bytes,
                algorithm=algorithm,
            )
        )
        logger.info("Created software credential for %s on %s", options.user_name, options.rp_id)
        return Credential(
            credential_id=credential_id,
            public_key=_cose_public_key(private_key.public_key()),
            algorithm=algorithm,
        )

    def _find_credential(self, options: RequestOptions) -> StoredCredential:
        allowed = set(options.allow_credentials)
        for credential in self.store:
            if credential.rp_id != options.rp_id:
                continue
            if allowed and credential.credential_id not in allowed:
                continue
            if options.user_name is not None and credential.user_name != options.user_name:
                continue
            return credential
        if options.user_name is not None:
            raise AuthenticatorError(
                f"No credential registered for user {options.user_name!r} on relying party {options.rp_id!r}"
            )
        raise AuthenticatorError(f"No credential registered for relying party {options.rp_id!r}")

    def get_assertion(self, options: RequestOptions) -> Assertion:
        _check_rp_binding(options.rp_id, options.origin)
        user_verified = self._require_user_verification(options.user_verification)
        credential = self._find_credential(options)

        client_data = _client_data_json("webauthn.get", options.challenge, options.origin)
        authenticator_data = _authenticator_data(options.rp_id, user_verified)
        signing_key = ed25519.Ed25519PrivateKey.from_private_bytes(credential.private_key)
        signature = signing_key.sign(authenticator_data + hashlib.sha256(client_data).digest())

        logger.debug("Produced assertion for %s on %s", credential.user_name, options.rp_id)
        return Assertion(
            credential_id=credential.credential_id,
            authenticator_data=authenticator_data,
            client_data_json=client_data,
            signature=signature,
            user_handle=credential.user_id,
        )


__all__ = [
    "SUPPORTED_ALGORITHMS",
    "SoftwareAuthenticator",
]
