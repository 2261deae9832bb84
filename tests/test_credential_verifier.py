"""Tests for the GitHub credential verifier.

The HTTP layer is replaced with httpx.MockTransport so no network is used.
"""

import json

import httpx
import pytest

from app.adapters.credentials.base import InvalidToken, ValidIdentity
from app.adapters.credentials.github_client import GitHubCredentialVerifier


def _verifier(handler) -> GitHubCredentialVerifier:
    return GitHubCredentialVerifier(
        api_url="https://api.github.test",
        user_agent="Thunderstorm/1.0 (Linux)",
        timeout_seconds=1.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_valid_token_returns_identity() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": 583231, "login": "octocat"})

    verifier = _verifier(handler)
    outcome = await verifier.verify("gho_abc123")
    await verifier.aclose()

    assert outcome == ValidIdentity(identity_id="583231", display_name="octocat")
    request = seen[0]
    assert request.method == "GET"
    assert request.url == "https://api.github.test/user"
    assert request.headers["Authorization"] == "token gho_abc123"
    assert request.headers["User-Agent"] == "Thunderstorm/1.0 (Linux)"
    assert request.headers["Accept"] == "application/vnd.github+json"


@pytest.mark.asyncio
async def test_rejected_token() -> None:
    verifier = _verifier(lambda request: httpx.Response(401, json={"message": "Bad credentials"}))

    outcome = await verifier.verify("gho_revoked")

    assert isinstance(outcome, InvalidToken)
    assert outcome.reason == "status_401"


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, 42, "", "has space", "line\nbreak", "ünïcode"])
async def test_malformed_token_skips_network(token) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"id": 1, "login": "x"})

    outcome = await _verifier(handler).verify(token)

    assert outcome == InvalidToken(reason="malformed_token")
    assert calls == []


@pytest.mark.asyncio
async def test_transport_error_folds_into_invalid_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    outcome = await _verifier(handler).verify("gho_abc123")

    assert isinstance(outcome, InvalidToken)
    assert outcome.reason == "transport_error:ConnectTimeout"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response, reason",
    [
        (httpx.Response(200, content=b"not json"), "invalid_json"),
        (httpx.Response(200, content=json.dumps([1, 2]).encode()), "unexpected_body"),
        (httpx.Response(200, json={"login": "octocat"}), "missing_identity_fields"),
        (httpx.Response(200, json={"id": 1}), "missing_identity_fields"),
        (httpx.Response(200, json={"id": True, "login": "octocat"}), "missing_identity_fields"),
    ],
)
async def test_unusable_bodies(response: httpx.Response, reason: str) -> None:
    outcome = await _verifier(lambda request: response).verify("gho_abc123")

    assert outcome == InvalidToken(reason=reason)
