"""Credential verification adapters - turn login tokens into identities."""

from app.adapters.credentials.base import (
    AbstractCredentialVerifier,
    InvalidToken,
    ValidIdentity,
    VerificationOutcome,
)
from app.adapters.credentials.factory import create_credential_verifier
from app.adapters.credentials.github_client import GitHubCredentialVerifier

__all__ = [
    "AbstractCredentialVerifier",
    "GitHubCredentialVerifier",
    "InvalidToken",
    "ValidIdentity",
    "VerificationOutcome",
    "create_credential_verifier",
]
