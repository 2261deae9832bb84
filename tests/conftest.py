"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It points the settings at the in-memory store and a known article password
before any app module reads the environment.
"""

import os
from unittest.mock import Mock

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ["DB_BACKEND"] = "memory"
os.environ["APP_ARTICLE_PASSWORD"] = "test-article-password"
os.environ.setdefault("APP_CORS_ORIGIN", "http://icelolly.ddns.net:466")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from app.adapters.rate_limit.in_memory import InMemoryAttemptCounter, InMemoryCooldownLimiter
from app.adapters.storage.in_memory import InMemoryArticleStore
from app.core.app_factory import create_app
from app.core.dependencies import get_article_store, get_credential_verifier
from app.core.rate_limit import get_attempt_counter, get_comment_limiter

from tests.support import FakeVerifier


@pytest.fixture
def clock() -> Mock:
    """Controllable UNIX clock shared by the limiters."""
    return Mock(return_value=1000.0)


@pytest.fixture
def store() -> InMemoryArticleStore:
    return InMemoryArticleStore()


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def cooldown_limiter(clock: Mock) -> InMemoryCooldownLimiter:
    return InMemoryCooldownLimiter(cooldown_seconds=20, clock=clock)


@pytest.fixture
def attempt_counter(clock: Mock) -> InMemoryAttemptCounter:
    return InMemoryAttemptCounter(threshold=3, block_seconds=30, clock=clock)


@pytest.fixture
def app(store, verifier, cooldown_limiter, attempt_counter):
    """App instance wired to in-memory collaborators."""
    application = create_app()
    application.dependency_overrides[get_article_store] = lambda: store
    application.dependency_overrides[get_credential_verifier] = lambda: verifier
    application.dependency_overrides[get_comment_limiter] = lambda: cooldown_limiter
    application.dependency_overrides[get_attempt_counter] = lambda: attempt_counter
    return application


@pytest.fixture
def client(app) -> TestClient:
    """Test client with the lifespan running (startup and shutdown hooks)."""
    with TestClient(app) as test_client:
        yield test_client
