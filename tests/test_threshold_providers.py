try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import logging
from dataclasses import replace

import pytest

from stamp_iam.core.errors import AuthError, FailureCategory, FetchError
from stamp_iam.core.result import Err, Ok
from stamp_iam.providers import (
    Comparator,
    Threshold,
    VerificationProvider,
    github_providers,
    twitter_providers,
)
from stamp_iam.providers.catalog import TWITTER_FOLLOWER_TIERS
from stamp_iam.schemas import RequestPayload, VerifiedPayload
from stamp_iam.services import ExternalRecord, VerificationContext

SESSION_KEY = "twitter-myOAuthSession"
CODE = "ABC123_ACCESSCODE"
MOCK_CLIENT = object()


class StubOAuthClient:
    def __init__(self, platform: str = "twitter", *, error: Exception | None = None) -> None:
        self.platform = platform
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def build_authorization_url(self, callback=None):
        return "https://oauth.example.com/auth", f"{self.platform}-session"

    async def exchange_authorization_code(self, *, session_key: str, code: str):
        self.calls.append((session_key, code))
        if self.error is not None:
            raise self.error
        return MOCK_CLIENT


class StubFetcher:
    def __init__(self, result=None, *, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.clients: list[object] = []

    async def fetch(self, client):
        self.clients.append(client)
        if self.error is not None:
            raise self.error
        return self.result


def _twitter(oauth: StubOAuthClient, fetcher: StubFetcher):
    return {
        provider.type: replace(provider, fetcher=fetcher)
        for provider in twitter_providers(oauth)
    }


def _payload(provider_type: str) -> RequestPayload:
    return RequestPayload(type=provider_type, proofs={"sessionKey": SESSION_KEY, "code": CODE})


def _followers(count: int | None, username: str | None = "DpoppDev") -> Ok:
    metrics = {} if count is None else {"followers": count}
    return Ok(ExternalRecord(username=username, metrics=metrics))


async def _verify(provider_type: str, result=None, *, oauth=None, fetcher=None) -> VerifiedPayload:
    oauth = oauth or StubOAuthClient()
    fetcher = fetcher or StubFetcher(result)
    provider = _twitter(oauth, fetcher)[provider_type]
    return await provider.verify(_payload(provider_type), VerificationContext())


def test_providers_satisfy_protocol():
    for provider in twitter_providers(StubOAuthClient()):
        assert isinstance(provider, VerificationProvider)


def test_threshold_labels_and_comparators():
    assert Threshold.gt(100) == Threshold(Comparator.GT, 100, "gt100")
    assert Threshold.gte(1000).label == "gte1000"
    assert not Threshold.gt(100).is_met(100)
    assert Threshold.gt(100).is_met(101)
    assert Threshold.gte(1000).is_met(1000)


@pytest.mark.asyncio
async def test_handles_valid_verification_attempt():
    oauth = StubOAuthClient()
    fetcher = StubFetcher(_followers(200))

    verified = await _verify("TwitterFollowerGT100", oauth=oauth, fetcher=fetcher)

    assert oauth.calls == [(SESSION_KEY, CODE)]
    assert fetcher.clients == [MOCK_CLIENT]
    assert verified.model_dump(exclude_none=True) == {
        "valid": True,
        "record": {"username": "DpoppDev", "followerCount": "gt100"},
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("provider_type", "count"),
    [
        ("TwitterFollowerGT100", 50),
        ("TwitterFollowerGT500", 150),
        ("TwitterFollowerGTE1000", 900),
        ("TwitterFollowerGT5000", 2500),
    ],
)
async def test_follower_count_below_tier_is_invalid(provider_type, count):
    verified = await _verify(provider_type, _followers(count))
    assert verified == VerifiedPayload.invalid()
    assert verified.record is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("provider_type", "count", "label"),
    [
        ("TwitterFollowerGT100", 150, "gt100"),
        ("TwitterFollowerGT500", 700, "gt500"),
        ("TwitterFollowerGTE1000", 1500, "gte1000"),
        ("TwitterFollowerGT5000", 7500, "gt5000"),
    ],
)
async def test_follower_count_above_tier_is_valid(provider_type, count, label):
    verified = await _verify(provider_type, _followers(count))
    assert verified.valid is True
    assert verified.record == {"username": "DpoppDev", "followerCount": label}


@pytest.mark.asyncio
async def test_strict_boundary_is_exclusive():
    assert (await _verify("TwitterFollowerGT100", _followers(100))).valid is False
    assert (await _verify("TwitterFollowerGT100", _followers(101))).valid is True


@pytest.mark.asyncio
async def test_inclusive_boundary_accepts_exact_value():
    verified = await _verify("TwitterFollowerGTE1000", _followers(1000))
    assert verified.record == {"username": "DpoppDev", "followerCount": "gte1000"}


@pytest.mark.asyncio
async def test_tiers_do_not_promote():
    verified = await _verify("TwitterFollowerGT100", _followers(7500))
    assert verified.record["followerCount"] == "gt100"


@pytest.mark.asyncio
async def test_missing_username_is_invalid_even_when_threshold_met():
    verified = await _verify("TwitterFollowerGT100", _followers(500, username=None))
    assert verified == VerifiedPayload.invalid()


@pytest.mark.asyncio
async def test_missing_metric_is_invalid():
    verified = await _verify("TwitterFollowerGT100", _followers(None))
    assert verified.valid is False


@pytest.mark.asyncio
@pytest.mark.parametrize("provider_type", sorted(TWITTER_FOLLOWER_TIERS))
async def test_failed_fetch_is_invalid_for_every_tier(provider_type):
    verified = await _verify(provider_type, Err(FailureCategory.FETCH, "unauthorized"))
    assert verified == VerifiedPayload.invalid()


@pytest.mark.asyncio
async def test_fetcher_raising_is_invalid():
    fetcher = StubFetcher(error=FetchError("unauthorized", status_code=401))
    verified = await _verify("TwitterFollowerGT100", fetcher=fetcher)
    assert verified.valid is False


@pytest.mark.asyncio
async def test_unavailable_oauth_client_is_invalid_without_fetching():
    oauth = StubOAuthClient(error=AuthError("expired code"))
    fetcher = StubFetcher(_followers(200))

    verified = await _verify("TwitterFollowerGT100", oauth=oauth, fetcher=fetcher)

    assert verified == VerifiedPayload.invalid()
    assert fetcher.clients == []


@pytest.mark.asyncio
async def test_auth_and_fetch_failures_log_distinct_categories(caplog):
    caplog.set_level(logging.WARNING, logger="stamp_iam.providers.threshold")

    await _verify("TwitterFollowerGT100", oauth=StubOAuthClient(error=AuthError("rejected")))
    await _verify("TwitterFollowerGT100", Err(FailureCategory.FETCH, "rate limited"))
    await _verify("TwitterFollowerGT100", _followers(10, username=""))

    records = [r for r in caplog.records if r.name == "stamp_iam.providers.threshold"]
    assert [record.category for record in records] == ["auth", "fetch", "data_shape"]
    assert all(record.provider == "TwitterFollowerGT100" for record in records)


@pytest.mark.asyncio
async def test_account_provider_only_needs_username():
    verified = await _verify("Twitter", _followers(None))
    assert verified.record == {"username": "DpoppDev"}


@pytest.mark.asyncio
async def test_tweet_tier_reads_tweet_metric():
    result = Ok(ExternalRecord(username="DpoppDev", metrics={"followers": 0, "tweets": 11}))
    verified = await _verify("TwitterTweetGT10", result)
    assert verified.record == {"username": "DpoppDev", "tweetCount": "gt10"}


@pytest.mark.asyncio
async def test_github_repo_tier_is_inclusive():
    oauth = StubOAuthClient("github")
    providers = {provider.type: provider for provider in github_providers(oauth)}
    provider = providers["FiveOrMoreGithubRepos"]
    stub = StubFetcher(Ok(ExternalRecord(username="octocat", metrics={"repos": 5})))
    provider = replace(provider, fetcher=stub)

    verified = await provider.verify(_payload("FiveOrMoreGithubRepos"), VerificationContext())

    assert verified.record == {"username": "octocat", "repoCount": "gte5"}


def test_verified_payload_invariant():
    with pytest.raises(ValueError):
        VerifiedPayload(valid=True)
    with pytest.raises(ValueError):
        VerifiedPayload(valid=False, record={"username": "DpoppDev"})


def test_request_payload_requires_proofs():
    with pytest.raises(ValueError):
        RequestPayload(type="Twitter", proofs={"code": CODE})
