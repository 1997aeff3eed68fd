"""Ceremony records and the authenticator interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

COSE_ALG_EDDSA = -8
COSE_ALG_ES256 = -7

DEFAULT_TIMEOUT_MS = 60000
DEFAULT_ALGORITHMS: tuple[int, ...] = (COSE_ALG_EDDSA, COSE_ALG_ES256)


@dataclass(frozen=True)
class CreationOptions:
    """Parameters for an enrollment ("create credential") ceremony."""

    challenge: bytes
    rp_id: str
    rp_name: str
    user_id: bytes = field(repr=False)
    user_name: str
    display_name: str
    origin: str
    algorithms: tuple[int, ...] = DEFAULT_ALGORITHMS
    timeout: int = DEFAULT_TIMEOUT_MS
    authenticator_attachment: str = "platform"
    user_verification: str = "required"
    attestation: str = "direct"


@dataclass(frozen=True)
class RequestOptions:
    """Parameters for an assertion ("get signature") ceremony."""

    challenge: bytes
    rp_id: str
    origin: str
    timeout: int = DEFAULT_TIMEOUT_MS
    user_verification: str = "required"
    allow_credentials: tuple[bytes, ...] = ()
    user_name: str | None = None


@dataclass(frozen=True)
class Credential:
    """Public result of an enrollment ceremony."""

    credential_id: bytes
    public_key: bytes
    algorithm: int


@dataclass(frozen=True)
class Assertion:
    """Result of an assertion ceremony.

    ``signature`` is secret-dependent material and is excluded from ``repr``.
    """

    credential_id: bytes
    authenticator_data: bytes
    client_data_json: bytes
    signature: bytes = field(repr=False)
    user_handle: bytes | None = None


class Authenticator(Protocol):
    """Anything able to run WebAuthn-style ceremonies."""

    def is_available(self) -> bool:  # pragma: no cover - interface
        ...

    def make_credential(self, options: CreationOptions) -> Credential:  # pragma: no cover - interface
        ...

    def get_assertion(self, options: RequestOptions) -> Assertion:  # pragma: no cover - interface
        ...


def select_algorithm(requested: Sequence[int], supported: Sequence[int]) -> int | None:
    """Return the first requested COSE algorithm that is also supported."""

    for algorithm in requested:
        if algorithm in supported:
            return algorithm
    return None


__all__ = [
    "COSE_ALG_EDDSA",
    "COSE_ALG_ES256",
    "DEFAULT_ALGORITHMS",
    "DEFAULT_TIMEOUT_MS",
    "Assertion",
    "Authenticator",
    "CreationOptions",
    "Credential",
    "RequestOptions",
    "select_algorithm",
]
