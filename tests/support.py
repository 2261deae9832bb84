"""Test doubles and helpers shared by the test modules."""

import asyncio

from app.adapters.credentials.base import AbstractCredentialVerifier, InvalidToken, ValidIdentity
from app.adapters.storage.in_memory import InMemoryArticleStore

ARTICLE_PASSWORD = "test-article-password"
GOOD_TOKEN = "gho_good_token"
OTHER_TOKEN = "gho_other_token"


class FakeVerifier(AbstractCredentialVerifier):
    """Verifier answering from a fixed token -> identity table."""

    def __init__(self, identities: dict[str, ValidIdentity] | None = None) -> None:
        self.identities = identities or {
            GOOD_TOKEN: ValidIdentity(identity_id="1001", display_name="octocat"),
            OTHER_TOKEN: ValidIdentity(identity_id="2002", display_name="hubot"),
        }
        self.calls: list[object] = []

    async def verify(self, token: object):
        self.calls.append(token)
        if isinstance(token, str) and token in self.identities:
            return self.identities[token]
        return InvalidToken(reason="status_401")


def seed_article(store: InMemoryArticleStore, title: str = "Hello", **overrides) -> int:
    """Create an article synchronously for route tests."""
    fields = {
        "title": title,
        "description": "First post",
        "link": "/posts/hello.md",
        "category": "misc",
    }
    fields.update(overrides)
    return asyncio.run(store.create_article(**fields))
