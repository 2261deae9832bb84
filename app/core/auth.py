"""Shared-secret check for article creation.

Article creation is gated by a single password configured through the
environment (APP_ARTICLE_PASSWORD or PASSWORD). Without a configured password
every attempt is rejected.
"""

from __future__ import annotations

import hmac
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


def verify_article_password(provided: str, expected: str | None = None) -> bool:
    """Compare a submitted password with the configured one in constant time.

    Args:
        provided: Password from the request.
        expected: Configured password; defaults to settings.

    Returns:
        True if the passwords match.

    Examples:
        >>> verify_article_password("s3cret", "s3cret")
        True
        >>> verify_article_password("guess", "s3cret")
        False
        >>> verify_article_password("anything", "")
        False
    """
    secret = expected if expected is not None else settings.app.article_password
    if not secret:
        logger.error(
            "auth.article_password_not_configured",
            extra={"hint": "Set APP_ARTICLE_PASSWORD or PASSWORD"},
        )
        return False

    return hmac.compare_digest(provided.encode("utf-8"), secret.encode("utf-8"))
