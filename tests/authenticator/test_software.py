import hashlib
import json

import pytest
from cryptography.hazmat.primitives.asymmetric import ed25519
from fido2 import cbor

from passkey39.authenticator import (
    COSE_ALG_EDDSA,
    COSE_ALG_ES256,
    CreationOptions,
    MemoryCredentialStore,
    RequestOptions,
    SoftwareAuthenticator,
)
from passkey39.errors import AuthenticatorError

ORIGIN = "https://example.com"


def _creation_options(**overrides):
    values = {
        "challenge": b"enroll-challenge",
        "rp_id": "example.com",
        "rp_name": "example.com",
        "user_id": b"\x01" * 16,
        "user_name": "alice",
        "display_name": "alice",
        "origin": ORIGIN,
    }
    values.update(overrides)
    return CreationOptions(**values)


def _request_options(**overrides):
    values = {"challenge": b"login-challenge", "rp_id": "example.com", "origin": ORIGIN}
    values.update(overrides)
    return RequestOptions(**values)


@pytest.fixture
def authenticator():
    return SoftwareAuthenticator(MemoryCredentialStore())


def test_make_credential_returns_cose_ed25519_key(authenticator):
    credential = authenticator.make_credential(_creation_options())
    assert credential.algorithm == COSE_ALG_EDDSA
    assert len(credential.credential_id) == 16
    cose_key = cbor.decode(credential.public_key)
    assert cose_key[1] == 1
    assert cose_key[3] == COSE_ALG_EDDSA
    assert cose_key[-1] == 6
    assert len(cose_key[-2]) == 32


def test_assertion_is_stable_and_verifiable(authenticator):
    credential = authenticator.make_credential(_creation_options())
    first = authenticator.get_assertion(_request_options())
    second = authenticator.get_assertion(_request_options())

    assert first.signature == second.signature
    assert first.credential_id == credential.credential_id
    assert first.user_handle == b"\x01" * 16

    public_key = ed25519.Ed25519PublicKey.from_public_bytes(cbor.decode(credential.public_key)[-2])
    public_key.verify(first.signature, first.authenticator_data + hashlib.sha256(first.client_data_json).digest())


def test_assertion_binds_challenge_and_origin(authenticator):
    authenticator.make_credential(_creation_options())
    assertion = authenticator.get_assertion(_request_options())

    client_data = json.loads(assertion.client_data_json)
    assert client_data == {
        "type": "webauthn.get",
        "challenge": "bG9naW4tY2hhbGxlbmdl",
        "origin": ORIGIN,
        "crossOrigin": False,
    }
    assert assertion.authenticator_data[:32] == hashlib.sha256(b"example.com").digest()
    assert assertion.authenticator_data[32] == 0x05
    assert assertion.authenticator_data[33:] == b"\x00\x00\x00\x00"

    other = authenticator.get_assertion(_request_options(challenge=b"another-challenge"))
    assert other.signature != assertion.signature


def test_subdomain_origin_is_accepted(authenticator):
    authenticator.make_credential(_creation_options(origin="https://login.example.com"))
    assert authenticator.get_assertion(_request_options(origin="https://login.example.com")).signature


def test_foreign_origin_is_rejected(authenticator):
    with pytest.raises(AuthenticatorError, match="not valid for origin"):
        authenticator.make_credential(_creation_options(origin="https://evil-example.com"))


def test_unsupported_algorithms_rejected(authenticator):
    with pytest.raises(AuthenticatorError, match="algorithms"):
        authenticator.make_credential(_creation_options(algorithms=(COSE_ALG_ES256,)))


def test_missing_credential_rejected(authenticator):
    with pytest.raises(AuthenticatorError, match="No credential registered"):
        authenticator.get_assertion(_request_options())


def test_allow_list_selects_credential(authenticator):
    authenticator.make_credential(_creation_options(user_name="first"))
    second = authenticator.make_credential(_creation_options(user_name="second", user_id=b"\x02" * 16))

    assertion = authenticator.get_assertion(_request_options(allow_credentials=(second.credential_id,)))
    assert assertion.credential_id == second.credential_id
    assert assertion.user_handle == b"\x02" * 16

    with pytest.raises(AuthenticatorError):
        authenticator.get_assertion(_request_options(allow_credentials=(b"unknown",)))


def test_required_user_verification_needs_capability():
    authenticator = SoftwareAuthenticator(supports_user_verification=False)
    with pytest.raises(AuthenticatorError, match="User verification"):
        authenticator.make_credential(_creation_options())

    authenticator.make_credential(_creation_options(user_verification="preferred"))
    assertion = authenticator.get_assertion(_request_options(user_verification="preferred"))
    assert assertion.authenticator_data[32] == 0x01


def test_signature_hidden_from_repr(authenticator):
    authenticator.make_credential(_creation_options())
    assertion = authenticator.get_assertion(_request_options())
    assert assertion.signature.hex() not in repr(assertion)


def test_user_name_selects_that_users_credential(authenticator):
    alice = authenticator.make_credential(_creation_options(user_name="alice"))
    bob = authenticator.make_credential(_creation_options(user_name="bob", user_id=b"\x02" * 16))

    assert authenticator.get_assertion(_request_options(user_name="bob")).credential_id == bob.credential_id
    assert authenticator.get_assertion(_request_options(user_name="alice")).credential_id == alice.credential_id

    with pytest.raises(AuthenticatorError, match="user 'carol'"):
        authenticator.get_assertion(_request_options(user_name="carol"))
