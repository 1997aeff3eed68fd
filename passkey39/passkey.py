"""Ceremony orchestration: enroll a passkey, then regenerate its private key."""

from __future__ import annotations

import logging
import secrets

from .authenticator.base import (
    DEFAULT_ALGORITHMS,
    DEFAULT_TIMEOUT_MS,
    Authenticator,
    CreationOptions,
    Credential,
    RequestOptions,
)
from .core.challenge import build_challenge
from .core.private_key import PrivateKey
from .errors import AuthenticatorError, InvalidInput, UnsupportedEnvironment

logger = logging.getLogger(__name__)


class Passkey39:
    """Drive an :class:`Authenticator` and turn its signature into a key.

    ``rp_name`` doubles as the relying-party id of the ceremonies and as the
    key-derivation context label.  ``origin`` is the web origin the
    ceremonies run under.
    """

    def __init__(
        self,
        authenticator: Authenticator,
        *,
        rp_name: str,
        origin: str,
        challenge: str | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        algorithms: tuple[int, ...] = DEFAULT_ALGORITHMS,
    ):
        self.authenticator = authenticator
        self.rp_name = rp_name
        self.origin = origin
        self.challenge = challenge
        self.timeout_ms = timeout_ms
        self.algorithms = tuple(algorithms)

    def is_supported(self) -> bool:
        return self.authenticator.is_available()

    def _ensure_supported(self) -> None:
        if not self.is_supported():
            raise UnsupportedEnvironment("WebAuthn not supported")

    def challenge_for(self, username: str) -> str:
        return build_challenge(self.challenge, username, self.rp_name, self.origin)

    def create_passkey(self, username: str) -> Credential:
        """Enroll a platform credential bound to the deterministic challenge."""

        self._ensure_supported()
        challenge = self.challenge_for(username)
        options = CreationOptions(
            challenge=challenge.encode("utf-8"),
            rp_id=self.rp_name,
            rp_name=self.rp_name,
            user_id=secrets.token_bytes(16),
            user_name=username,
            display_name=username,
            origin=self.origin,
            algorithms=self.algorithms,
            timeout=self.timeout_ms,
        )
        try:
            credential = self.authenticator.make_credential(options)
        except AuthenticatorError:
            logger.error("Passkey creation failed for %s on %s", username, self.rp_name)
            raise
        logger.info("Created passkey for %s on %s", username, self.rp_name)
        return credential

    def authenticate(self, username: str, *, attempts: int = 1) -> PrivateKey:
        """Run an assertion ceremony and derive the private key.

        Failed ceremonies are retried up to ``attempts`` times with the exact
        same request, so every retry signs the same challenge.
        """

        if attempts < 1:
            raise InvalidInput("attempts must be at least 1")
        self._ensure_supported()

        challenge = self.challenge_for(username)
        options = RequestOptions(
            challenge=challenge.encode("utf-8"),
            rp_id=self.rp_name,
            origin=self.origin,
            timeout=self.timeout_ms,
            user_name=username,
        )

        for attempt in range(1, attempts + 1):
            try:
                assertion = self.authenticator.get_assertion(options)
                break
            except AuthenticatorError as exc:
                logger.warning(
                    "Assertion attempt %d/%d for %s on %s failed: %s",
                    attempt,
                    attempts,
                    username,
                    self.rp_name,
                    exc,
                )
                if attempt == attempts:
                    raise

        logger.info("Authenticated %s on %s", username, self.rp_name)
        return PrivateKey.derive(assertion.signature, challenge, self.rp_name)


__all__ = [
    "Passkey39",
]
