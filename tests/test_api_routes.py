try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

from dataclasses import replace

import httpx
import pytest

from stamp_iam import dependencies
from stamp_iam.core.result import Ok
from stamp_iam.handshake import ChannelHub, channel_name
from stamp_iam.main import app
from stamp_iam.providers import ProviderRegistry, twitter_providers
from stamp_iam.services import ExternalRecord


class DummyOAuthClient:
    platform = "twitter"

    def __init__(self) -> None:
        self.callbacks: list[str | None] = []
        self.codes: list[str] = []

    def build_authorization_url(self, callback: str | None = None) -> tuple[str, str]:
        self.callbacks.append(callback)
        return "https://twitter.com/i/oauth2/authorize?state=twitter-abc", "twitter-abc"

    async def exchange_authorization_code(self, *, session_key: str, code: str):
        self.codes.append(code)
        return object()


class DummyFetcher:
    async def fetch(self, client):
        return Ok(ExternalRecord(username="DpoppDev", metrics={"followers": 600, "tweets": 3}))


@pytest.fixture()
def api_overrides():
    oauth = DummyOAuthClient()
    hub = ChannelHub()
    registry = ProviderRegistry(
        replace(provider, fetcher=DummyFetcher()) for provider in twitter_providers(oauth)
    )

    app.dependency_overrides.update(
        {
            dependencies.get_oauth_clients: lambda: {"twitter": oauth},
            dependencies.get_channel_hub: lambda: hub,
            dependencies.get_provider_registry: lambda: registry,
        }
    )

    yield oauth, hub

    app.dependency_overrides.clear()


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )


@pytest.mark.anyio
async def test_health():
    async with _client() as client:
        response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "environment" in response.json()


@pytest.mark.anyio
async def test_generate_auth_url_returns_auth_url(api_overrides):
    oauth, _ = api_overrides

    async with _client() as client:
        response = await client.post(
            "/api/twitter/generateAuthUrl",
            json={"callback": "https://app.example.com/popup"},
        )

    assert response.status_code == 200
    assert response.json() == {"authUrl": "https://twitter.com/i/oauth2/authorize?state=twitter-abc"}
    assert oauth.callbacks == ["https://app.example.com/popup"]


@pytest.mark.anyio
async def test_generate_auth_url_for_unknown_platform_is_404(api_overrides):
    async with _client() as client:
        response = await client.post("/api/myspace/generateAuthUrl", json={})

    assert response.status_code == 404


@pytest.mark.anyio
async def test_callback_posts_redirect_to_channel(api_overrides):
    _, hub = api_overrides

    with hub.subscribe(channel_name("twitter")) as subscription:
        async with _client() as client:
            response = await client.get(
                "/api/twitter/callback", params={"state": "twitter-abc", "code": "ABC123"}
            )
        message = await subscription.receive()

    assert response.status_code == 200
    assert "window.close()" in response.text
    assert message.target == "twitter"
    assert (message.data.code, message.data.state) == ("ABC123", "twitter-abc")


@pytest.mark.anyio
async def test_denied_callback_posts_nothing(api_overrides):
    _, hub = api_overrides

    with hub.subscribe(channel_name("twitter")):
        async with _client() as client:
            response = await client.get(
                "/api/twitter/callback",
                params={"state": "twitter-abc", "error": "access_denied"},
            )

    assert response.status_code == 200
    assert "not completed" in response.text


@pytest.mark.anyio
async def test_verify_returns_each_requested_type(api_overrides):
    oauth, _ = api_overrides

    async with _client() as client:
        response = await client.post(
            "/api/verify",
            json={
                "type": "Twitter",
                "types": ["TwitterFollowerGT500", "TwitterFollowerGTE1000"],
                "address": "0xabc",
                "proofs": {"sessionKey": "twitter-abc", "code": "ABC123"},
            },
        )

    assert response.status_code == 200
    assert response.json() == {
        "credentials": [
            {"type": "Twitter", "valid": True, "record": {"username": "DpoppDev"}},
            {
                "type": "TwitterFollowerGT500",
                "valid": True,
                "record": {"username": "DpoppDev", "followerCount": "gt500"},
            },
            {"type": "TwitterFollowerGTE1000", "valid": False},
        ]
    }
    assert oauth.codes == ["ABC123"]


@pytest.mark.anyio
async def test_verify_without_types_is_rejected(api_overrides):
    async with _client() as client:
        response = await client.post(
            "/api/verify", json={"proofs": {"sessionKey": "twitter-abc", "code": "ABC123"}}
        )

    assert response.status_code == 422


@pytest.mark.anyio
async def test_verify_without_code_is_rejected(api_overrides):
    async with _client() as client:
        response = await client.post(
            "/api/verify", json={"type": "Twitter", "proofs": {"sessionKey": "twitter-abc"}}
        )

    assert response.status_code == 422


@pytest.mark.anyio
async def test_verify_unknown_type_is_404(api_overrides):
    oauth, _ = api_overrides

    async with _client() as client:
        response = await client.post(
            "/api/verify",
            json={"type": "MySpaceFriends", "proofs": {"sessionKey": "twitter-abc", "code": "ABC123"}},
        )

    assert response.status_code == 404
    assert oauth.codes == []
