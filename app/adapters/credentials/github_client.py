"""GitHub token verification client."""

import logging
from typing import Any

import httpx

from app.adapters.credentials.base import (
    AbstractCredentialVerifier,
    InvalidToken,
    ValidIdentity,
    VerificationOutcome,
)

logger = logging.getLogger(__name__)


def _is_well_formed(token: object) -> bool:
    """A token must be a non-empty ASCII string of printable, non-space characters."""
    if not isinstance(token, str) or not token or not token.isascii():
        return False
    return all(ch.isprintable() and not ch.isspace() for ch in token)


class GitHubCredentialVerifier(AbstractCredentialVerifier):
    """Verify GitHub login tokens by calling ``GET /user``.

    Uses a shared ``httpx.AsyncClient`` so connections are pooled across
    requests. Every failure mode is folded into ``InvalidToken``; callers
    cannot tell a revoked token from an unreachable GitHub.
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        user_agent: str = "Thunderstorm/1.0 (Linux)",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            api_url: Base URL of the GitHub REST API.
            user_agent: User-Agent header value (GitHub rejects requests without one).
            timeout_seconds: Timeout for the whole verification call.
            transport: Optional custom transport (used by tests).
        """
        self.client = httpx.AsyncClient(
            base_url=api_url,
            headers={
                "User-Agent": user_agent,
                "Accept": "application/vnd.github+json",
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    async def verify(self, token: object) -> VerificationOutcome:
        if not _is_well_formed(token):
            return InvalidToken(reason="malformed_token")

        try:
            response = await self.client.get(
                "/user",
                headers={"Authorization": f"token {token}"},
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "credentials.transport_error",
                extra={"error_type": type(exc).__name__},
            )
            return InvalidToken(reason=f"transport_error:{type(exc).__name__}")

        if response.status_code != 200:
            return InvalidToken(reason=f"status_{response.status_code}")

        try:
            body: Any = response.json()
        except ValueError:
            return InvalidToken(reason="invalid_json")

        if not isinstance(body, dict):
            return InvalidToken(reason="unexpected_body")

        identity_id = body.get("id")
        login = body.get("login")
        if identity_id is None or isinstance(identity_id, bool) or not isinstance(login, str) or not login:
            return InvalidToken(reason="missing_identity_fields")

        return ValidIdentity(identity_id=str(identity_id), display_name=login)

    async def aclose(self) -> None:
        await self.client.aclose()
