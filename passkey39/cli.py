"""Command line entrypoint for passkey39."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from .authenticator.software import SoftwareAuthenticator
from .authenticator.store import FileCredentialStore, b64url_encode
from .core.challenge import build_challenge
from .core.kdf import KEY_LENGTH
from .core.private_key import PrivateKey
from .errors import InvalidInput, Passkey39Error
from .passkey import Passkey39

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CliConfig:
    command: str
    username: str
    rp_name: str
    origin: str
    base_challenge: str | None
    signature_hex: str | None
    signature_file: Path | None
    length: int
    store: Path
    attempts: int
    verbose: bool


def _default_store_path() -> Path:
    return Path.home() / ".passkey39" / "credentials.json"


def _add_identity_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--username", required=True)
    parser.add_argument("--rp-name", required=True, help="Relying-party name, also the KDF context label")
    parser.add_argument("--origin", required=True, help="Origin the ceremony runs under, e.g. https://example.com")
    parser.add_argument("--base-challenge", help="Override the default public challenge phrase")


def _parse_args(argv: Sequence[str] | None) -> CliConfig:
    parser = argparse.ArgumentParser(description="Derive deterministic private keys from passkey signatures")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    challenge = commands.add_parser("challenge", help="Print the deterministic challenge")
    _add_identity_arguments(challenge)

    derive = commands.add_parser("derive", help="Derive a key from a raw signature")
    _add_identity_arguments(derive)
    source = derive.add_mutually_exclusive_group(required=True)
    source.add_argument("--signature-hex", help="Signature as a hexadecimal string")
    source.add_argument("--signature-file", type=Path, help="File holding the raw signature bytes")
    derive.add_argument("--length", type=int, default=KEY_LENGTH, help="Number of key bytes to derive")

    for name, summary in (
        ("enroll", "Create a software passkey"),
        ("authenticate", "Authenticate with a software passkey and print the key"),
    ):
        sub = commands.add_parser(name, help=summary)
        _add_identity_arguments(sub)
        sub.add_argument("--store", type=Path, default=_default_store_path(), help="Credential store file")
        sub.add_argument("--attempts", type=int, default=1, help="Assertion attempts before giving up")

    args = parser.parse_args(argv)
    return CliConfig(
        command=args.command,
        username=args.username,
        rp_name=args.rp_name,
        origin=args.origin,
        base_challenge=args.base_challenge,
        signature_hex=getattr(args, "signature_hex", None),
        signature_file=getattr(args, "signature_file", None),
        length=getattr(args, "length", KEY_LENGTH),
        store=getattr(args, "store", _default_store_path()),
        attempts=getattr(args, "attempts", 1),
        verbose=args.verbose,
    )


def _read_signature(config: CliConfig) -> bytes:
    if config.signature_file is not None:
        try:
            return config.signature_file.read_bytes()
        except OSError as exc:
            raise InvalidInput(f"Cannot read signature file {config.signature_file}: {exc.strerror}") from exc
    assert config.signature_hex is not None  # enforced by the mutually exclusive group
    try:
        return bytes.fromhex(config.signature_hex)
    except ValueError as exc:
        raise InvalidInput("--signature-hex is not valid hexadecimal") from exc


def _describe_key(key: PrivateKey) -> dict[str, Any]:
    try:
        mnemonic = key.mnemonic
    except InvalidInput:
        mnemonic = None
    return {
        "length": len(key),
        "hex": key.hex,
        "mnemonic": mnemonic,
    }


def _run(config: CliConfig) -> dict[str, Any]:
    challenge = build_challenge(config.base_challenge, config.username, config.rp_name, config.origin)

    if config.command == "challenge":
        return {"challenge": challenge}

    if config.command == "derive":
        signature = _read_signature(config)
        key = PrivateKey.derive(signature, challenge, config.rp_name, length=config.length)
        return {"challenge": challenge, "key": _describe_key(key)}

    authenticator = SoftwareAuthenticator(FileCredentialStore(config.store))
    passkey = Passkey39(
        authenticator,
        rp_name=config.rp_name,
        origin=config.origin,
        challenge=config.base_challenge,
    )
    if config.command == "enroll":
        credential = passkey.create_passkey(config.username)
        return {
            "credential_id": b64url_encode(credential.credential_id),
            "algorithm": credential.algorithm,
            "store": str(config.store),
        }

    key = passkey.authenticate(config.username, attempts=config.attempts)
    return {"key": _describe_key(key)}


def main(argv: Sequence[str] | None = None) -> None:
    config = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        result = _run(config)
    except Passkey39Error as exc:
        logger.debug("Command %s failed", config.command, exc_info=True)
        raise SystemExit(str(exc)) from exc

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
