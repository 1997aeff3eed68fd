"""Credential storage for the software authenticator."""

from __future__ import annotations

import base64
import json
import logging
import os
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Protocol

from dateutil import parser as date_parser
from jsonschema import Draft202012Validator

from ..errors import AuthenticatorError

logger = logging.getLogger(__name__)

STORE_VERSION = 1


def _default_schema_path() -> Path:
    return Path(__file__).resolve().parents[1] / "schema" / "credential_store.schema.json"


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


class CredentialStore(Protocol):
    """Append-only collection of software credentials."""

    def add(self, credential: "StoredCredential") -> None:  # pragma: no cover - interface
        ...

    def __iter__(self) -> Iterator["StoredCredential"]:  # pragma: no cover - interface
        ...


@dataclass(slots=True)
class StoredCredential:
    """A credential held by the software authenticator."""

    credential_id: bytes
    rp_id: str
    user_id: bytes
    user_name: str
    display_name: str
    private_key: bytes = field(repr=False)
    algorithm: int
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, object]:
        return {
            "credential_id": b64url_encode(self.credential_id),
            "rp_id": self.rp_id,
            "user_id": b64url_encode(self.user_id),
            "user_name": self.user_name,
            "display_name": self.display_name,
            "private_key": b64url_encode(self.private_key),
            "algorithm": self.algorithm,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoredCredential":
        created_at = date_parser.isoparse(data["created_at"])
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            credential_id=b64url_decode(data["credential_id"]),
            rp_id=data["rp_id"],
            user_id=b64url_decode(data["user_id"]),
            user_name=data["user_name"],
            display_name=data["display_name"],
            private_key=b64url_decode(data["private_key"]),
            algorithm=int(data["algorithm"]),
            created_at=created_at,
        )


class MemoryCredentialStore:
    """In-memory store useful for testing."""

    def __init__(self) -> None:
        self._credentials: list[StoredCredential] = []

    def add(self, credential: StoredCredential) -> None:
        self._credentials.append(credential)

    def __iter__(self) -> Iterator[StoredCredential]:
        return iter(self._credentials)


class FileCredentialStore:
    """JSON-file store validated against the bundled schema.

    The file holds private keys and is written with owner-only permissions.
    """

    def __init__(self, path: Path, *, schema_path: Path | None = None):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        schema = json.loads((schema_path or _default_schema_path()).read_text(encoding="utf-8"))
        self._validator = Draft202012Validator(schema)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"version": STORE_VERSION, "credentials": []}
        with self.path.open("r", encoding="utf-8") as handle:
            try:
                document = json.load(handle)
            except json.JSONDecodeError as exc:
                raise AuthenticatorError(f"Credential store {self.path} is not valid JSON") from exc

        errors = sorted(self._validator.iter_errors(document), key=lambda err: str(list(err.path)))
        if errors:
            details = "; ".join(f"{list(error.path)}: {error.message}" for error in errors)
            raise AuthenticatorError(f"Credential store {self.path} is malformed: {details}")
        return document

    def _write(self, payload: bytes) -> None:
        # Created owner-only, then swapped in atomically over the old store.
        temp_path = self.path.with_name(f".{self.path.name}.{secrets.token_hex(8)}.tmp")
        fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self.path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

    def add(self, credential: StoredCredential) -> None:
        document = self._load()
        document["credentials"].append(credential.to_dict())
        self._write(json.dumps(document, indent=2).encode("utf-8"))
        logger.debug("Stored credential for %s on %s in %s", credential.user_name, credential.rp_id, self.path)

    def __iter__(self) -> Iterator[StoredCredential]:
        for entry in self._load()["credentials"]:
            try:
                credential = StoredCredential.from_dict(entry)
            except ValueError as exc:
                raise AuthenticatorError(f"Credential store {self.path} holds an unreadable entry") from exc
            yield credential


__all__ = [
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "StoredCredential",
    "b64url_decode",
    "b64url_encode",
]
