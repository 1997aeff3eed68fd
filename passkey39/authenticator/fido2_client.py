"""Adapter running ceremonies on a CTAP2 device through python-fido2."""

from __future__ import annotations

import logging
from typing import Any

from fido2 import cbor
from fido2.client import ClientError, Fido2Client
from fido2.hid import CtapHidDevice
from fido2.webauthn import (
    AttestationConveyancePreference,
    AuthenticatorAttachment,
    AuthenticatorSelectionCriteria,
    PublicKeyCredentialCreationOptions,
    PublicKeyCredentialDescriptor,
    PublicKeyCredentialParameters,
    PublicKeyCredentialRequestOptions,
    PublicKeyCredentialRpEntity,
    PublicKeyCredentialType,
    PublicKeyCredentialUserEntity,
    UserVerificationRequirement,
)

from ..errors import AuthenticatorError, UnsupportedEnvironment
from .base import Assertion, CreationOptions, Credential, RequestOptions

logger = logging.getLogger(__name__)


def to_creation_options(options: CreationOptions) -> PublicKeyCredentialCreationOptions:
    return PublicKeyCredentialCreationOptions(
        rp=PublicKeyCredentialRpEntity(name=options.rp_name, id=options.rp_id),
        user=PublicKeyCredentialUserEntity(
            name=options.user_name,
            id=options.user_id,
            display_name=options.display_name,
        ),
        challenge=options.challenge,
        pub_key_cred_params=[
            PublicKeyCredentialParameters(type=PublicKeyCredentialType.PUBLIC_KEY, alg=alg)
            for alg in options.algorithms
        ],
        timeout=options.timeout,
        authenticator_selection=AuthenticatorSelectionCriteria(
            authenticator_attachment=AuthenticatorAttachment(options.authenticator_attachment),
            user_verification=UserVerificationRequirement(options.user_verification),
        ),
        attestation=AttestationConveyancePreference(options.attestation),
    )


def to_request_options(options: RequestOptions) -> PublicKeyCredentialRequestOptions:
    allow_credentials = [
        PublicKeyCredentialDescriptor(type=PublicKeyCredentialType.PUBLIC_KEY, id=credential_id)
        for credential_id in options.allow_credentials
    ]
    return PublicKeyCredentialRequestOptions(
        challenge=options.challenge,
        timeout=options.timeout,
        rp_id=options.rp_id,
        allow_credentials=allow_credentials or None,
        user_verification=UserVerificationRequirement(options.user_verification),
    )


class Fido2Authenticator:
    """Authenticator backed by :class:`fido2.client.Fido2Client`.

    Pass ``client`` to reuse an existing client; otherwise the first CTAP HID
    device found is used.
    """

    def __init__(self, origin: str, *, device: Any = None, client: Any = None):
        self.origin = origin
        self._device = device
        self._client = client

    def _find_device(self) -> Any:
        if self._device is None:
            self._device = next(CtapHidDevice.list_devices(), None)
        return self._device

    def is_available(self) -> bool:
        return self._client is not None or self._find_device() is not None

    @property
    def client(self) -> Any:
        if self._client is None:
            device = self._find_device()
            if device is None:
                raise UnsupportedEnvironment("No FIDO2 device found")
            self._client = Fido2Client(device, self.origin)
        return self._client

    def make_credential(self, options: CreationOptions) -> Credential:
        try:
            result = self.client.make_credential(to_creation_options(options))
        except ClientError as exc:
            raise AuthenticatorError(f"Credential creation failed: {exc}") from exc

        credential_data = result.attestation_object.auth_data.credential_data
        if credential_data is None:
            raise AuthenticatorError("Authenticator returned no attested credential data")

        public_key = dict(credential_data.public_key)
        logger.info("Created FIDO2 credential for %s on %s", options.user_name, options.rp_id)
        return Credential(
            credential_id=bytes(credential_data.credential_id),
            public_key=cbor.encode(public_key),
            algorithm=int(public_key.get(3, 0)),
        )

    def get_assertion(self, options: RequestOptions) -> Assertion:
        try:
            selection = self.client.get_assertion(to_request_options(options))
            response = selection.get_response(0)
        except ClientError as exc:
            raise AuthenticatorError(f"Assertion failed: {exc}") from exc

        return Assertion(
            credential_id=bytes(response.credential_id),
            authenticator_data=bytes(response.authenticator_data),
            client_data_json=bytes(response.client_data),
            signature=bytes(response.signature),
            user_handle=bytes(response.user_handle) if response.user_handle is not None else None,
        )


__all__ = [
    "Fido2Authenticator",
    "to_creation_options",
    "to_request_options",
]
