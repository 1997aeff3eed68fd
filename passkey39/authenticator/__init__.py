"""Authenticator interface and implementations."""

from .base import (
    COSE_ALG_EDDSA,
    COSE_ALG_ES256,
    DEFAULT_ALGORITHMS,
    DEFAULT_TIMEOUT_MS,
    Assertion,
    Authenticator,
    CreationOptions,
    Credential,
    RequestOptions,
)
from .software import SoftwareAuthenticator
from .store import CredentialStore, FileCredentialStore, MemoryCredentialStore, StoredCredential

__all__ = [
    "COSE_ALG_EDDSA",
    "COSE_ALG_ES256",
    "DEFAULT_ALGORITHMS",
    "DEFAULT_TIMEOUT_MS",
    "Assertion",
    "Authenticator",
    "CreationOptions",
    "Credential",
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "RequestOptions",
    "SoftwareAuthenticator",
    "StoredCredential",
]
