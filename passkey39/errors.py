"""Exception hierarchy shared by the core, the authenticators and the CLI."""

from __future__ import annotations


class Passkey39Error(Exception):
    """Base class for every error raised by passkey39."""


class UnsupportedEnvironment(Passkey39Error):
    """No authenticator capability is available on this platform."""


class InvalidInput(Passkey39Error, ValueError):
    """A caller supplied an empty or malformed value."""


class DerivationFailure(Passkey39Error):
    """The key-derivation backend rejected its parameters."""


class AuthenticatorError(Passkey39Error):
    """An enrollment or assertion ceremony failed."""


__all__ = [
    "Passkey39Error",
    "UnsupportedEnvironment",
    "InvalidInput",
    "DerivationFailure",
    "AuthenticatorError",
]
