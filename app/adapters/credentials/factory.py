"""Factory for the credential verifier used by comment submission."""

from app.adapters.credentials.base import AbstractCredentialVerifier
from app.adapters.credentials.github_client import GitHubCredentialVerifier
from app.core.config import settings


def create_credential_verifier() -> AbstractCredentialVerifier:
    """Instantiate the GitHub verifier from app.core.config.settings.

    Returns:
        AbstractCredentialVerifier: Configured verifier instance.
    """
    return GitHubCredentialVerifier(
        api_url=settings.github.api_url,
        user_agent=settings.github.user_agent,
        timeout_seconds=settings.github.timeout_seconds,
    )
