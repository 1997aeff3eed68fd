from types import SimpleNamespace

import pytest
from fido2 import cbor
from fido2.client import ClientError
from fido2.webauthn import (
    AttestationConveyancePreference,
    AuthenticatorAttachment,
    PublicKeyCredentialCreationOptions,
    PublicKeyCredentialRequestOptions,
    UserVerificationRequirement,
)

from passkey39.authenticator import fido2_client
from passkey39.authenticator.base import CreationOptions, RequestOptions
from passkey39.authenticator.fido2_client import Fido2Authenticator
from passkey39.errors import AuthenticatorError, UnsupportedEnvironment

ORIGIN = "https://example.com"
CREATION = CreationOptions(
    challenge=b"challenge",
    rp_id="example.com",
    rp_name="example.com",
    user_id=b"\x01" * 16,
    user_name="alice",
    display_name="alice",
    origin=ORIGIN,
)
REQUEST = RequestOptions(challenge=b"challenge", rp_id="example.com", origin=ORIGIN)


class FakeClient:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def make_credential(self, options):
        self.calls.append(options)
        if self.error:
            raise self.error
        credential_data = SimpleNamespace(credential_id=b"cred-id", public_key={1: 2, 3: -7})
        return SimpleNamespace(attestation_object=SimpleNamespace(auth_data=SimpleNamespace(credential_data=credential_data)))

    def get_assertion(self, options):
        self.calls.append(options)
        if self.error:
            raise self.error
        response = SimpleNamespace(
            credential_id=b"cred-id",
            authenticator_data=b"auth-data",
            client_data=b"{}",
            signature=b"signature",
            user_handle=None,
        )
        return SimpleNamespace(get_response=lambda index: response)


def test_creation_options_mapping():
    options = fido2_client.to_creation_options(CREATION)
    assert isinstance(options, PublicKeyCredentialCreationOptions)
    assert options.rp.id == "example.com"
    assert options.rp.name == "example.com"
    assert options.user.name == "alice"
    assert options.user.id == b"\x01" * 16
    assert [param.alg for param in options.pub_key_cred_params] == [-8, -7]
    assert options.timeout == 60000
    assert options.authenticator_selection.authenticator_attachment == AuthenticatorAttachment.PLATFORM
    assert options.authenticator_selection.user_verification == UserVerificationRequirement.REQUIRED
    assert options.attestation == AttestationConveyancePreference.DIRECT


def test_request_options_mapping():
    options = fido2_client.to_request_options(REQUEST)
    assert isinstance(options, PublicKeyCredentialRequestOptions)
    assert options.challenge == b"challenge"
    assert options.rp_id == "example.com"
    assert options.allow_credentials is None
    assert options.user_verification == UserVerificationRequirement.REQUIRED


def test_make_credential_through_client():
    client = FakeClient()
    authenticator = Fido2Authenticator(ORIGIN, client=client)
    assert authenticator.is_available()

    credential = authenticator.make_credential(CREATION)
    assert credential.credential_id == b"cred-id"
    assert credential.algorithm == -7
    assert cbor.decode(credential.public_key) == {1: 2, 3: -7}
    assert len(client.calls) == 1


def test_get_assertion_through_client():
    authenticator = Fido2Authenticator(ORIGIN, client=FakeClient())
    assertion = authenticator.get_assertion(REQUEST)
    assert assertion.signature == b"signature"
    assert assertion.client_data_json == b"{}"
    assert assertion.user_handle is None


def test_client_errors_become_authenticator_errors():
    authenticator = Fido2Authenticator(ORIGIN, client=FakeClient(ClientError(ClientError.ERR.TIMEOUT)))
    with pytest.raises(AuthenticatorError, match="Assertion failed"):
        authenticator.get_assertion(REQUEST)


def test_missing_device_is_unsupported(monkeypatch):
    monkeypatch.setattr(fido2_client.CtapHidDevice, "list_devices", staticmethod(lambda: iter(())))
    authenticator = Fido2Authenticator(ORIGIN)
    assert not authenticator.is_available()
    with pytest.raises(UnsupportedEnvironment):
        authenticator.get_assertion(REQUEST)
