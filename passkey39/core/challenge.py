"""Deterministic challenge construction.

The same challenge string is used at enrollment and at every later
authentication so both ceremonies bind to the same derived key.  The base
phrase is public; it only separates this derivation domain from others.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGE = (
    "Never share your private key or recovery phrase with anyone. "
    "Your financial security depends on keeping these credentials absolutely "
    "private and secure. Only you should have access to your Bitcoin wallet."
)


def _as_text(name: str, value: object) -> str:
    text = "" if value is None else str(value)
    if not text:
        logger.warning("Building challenge with an empty %s", name)
    return text


def build_challenge(
    base_challenge: str | None,
    username: str,
    rp_name: str,
    origin: str,
) -> str:
    """Return ``<base>:<username>@<rp_name>@<origin>``.

    ``base_challenge`` falls back to :data:`DEFAULT_CHALLENGE` when ``None``.
    The origin is always passed in by the caller; nothing here reads ambient
    state, so the output is identical across calls, processes and machines.
    """

    base = DEFAULT_CHALLENGE if base_challenge is None else str(base_challenge)
    user_salt = "@".join(
        (
            _as_text("username", username),
            _as_text("rp_name", rp_name),
            _as_text("origin", origin),
        )
    )
    return f"{base}:{user_salt}"


__all__ = [
    "DEFAULT_CHALLENGE",
    "build_challenge",
]
