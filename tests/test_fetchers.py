try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from stamp_iam.core.errors import DataShapeError, FailureCategory, FetchError
from stamp_iam.core.result import Err, Ok
from stamp_iam.providers import twitter_providers
from stamp_iam.schemas import RequestPayload, VerifiedPayload
from stamp_iam.services import (
    ExternalRecord,
    GithubProfileFetcher,
    TwitterProfileFetcher,
    VerificationContext,
)


class FakeTwitterApi:
    def __init__(self, data=None, *, error: Exception | None = None) -> None:
        self.data = data if data is not None else {}
        self.error = error

    async def find_my_user(self):
        if self.error is not None:
            raise self.error
        return self.data


class FakeGithubApi:
    def __init__(self, data=None, *, error: Exception | None = None) -> None:
        self.data = data if data is not None else {}
        self.error = error

    async def get_user(self):
        if self.error is not None:
            raise self.error
        return self.data


class FixedOAuthClient:
    platform = "twitter"

    def __init__(self, api) -> None:
        self.api = api

    def build_authorization_url(self, callback=None):
        return "https://oauth.example.com/auth", "twitter-session"

    async def exchange_authorization_code(self, *, session_key: str, code: str):
        return self.api


@pytest.mark.asyncio
async def test_twitter_fetcher_normalizes_public_metrics() -> None:
    api = FakeTwitterApi(
        {
            "id": "1",
            "username": "DpoppDev",
            "public_metrics": {"followers_count": 200, "tweet_count": 42, "listed_count": 3},
        }
    )

    result = await TwitterProfileFetcher().fetch(api)

    assert result == Ok(ExternalRecord(username="DpoppDev", metrics={"followers": 200, "tweets": 42}))


@pytest.mark.asyncio
async def test_twitter_fetcher_keeps_empty_profile_as_ok() -> None:
    result = await TwitterProfileFetcher().fetch(FakeTwitterApi({}))

    assert isinstance(result, Ok)
    assert result.value.username is None
    assert dict(result.value.metrics) == {}


@pytest.mark.asyncio
async def test_twitter_fetcher_turns_fetch_error_into_err() -> None:
    api = FakeTwitterApi(error=FetchError("Twitter users/me returned 401", status_code=401))

    result = await TwitterProfileFetcher().fetch(api)

    assert isinstance(result, Err)
    assert result.category is FailureCategory.FETCH
    assert "401" in result.message


@pytest.mark.asyncio
async def test_twitter_fetcher_ignores_non_integer_counts() -> None:
    api = FakeTwitterApi(
        {"username": "DpoppDev", "public_metrics": {"followers_count": "200", "tweet_count": True}}
    )

    result = await TwitterProfileFetcher().fetch(api)

    assert dict(result.value.metrics) == {}


@pytest.mark.asyncio
async def test_github_fetcher_maps_login_and_counts() -> None:
    api = FakeGithubApi({"login": "octocat", "followers": 60, "public_repos": 8, "id": 1})

    result = await GithubProfileFetcher().fetch(api)

    assert result == Ok(ExternalRecord(username="octocat", metrics={"followers": 60, "repos": 8}))


@pytest.mark.asyncio
async def test_github_fetcher_turns_fetch_error_into_err() -> None:
    result = await GithubProfileFetcher().fetch(FakeGithubApi(error=FetchError("boom")))

    assert result == Err(FailureCategory.FETCH, "boom")


def test_external_record_requirements() -> None:
    record = ExternalRecord(username="", metrics={"followers": 0})

    with pytest.raises(DataShapeError):
        record.require_username()
    with pytest.raises(DataShapeError):
        record.require_metric("tweets")
    assert record.require_metric("followers") == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("public_metrics", [["followers_count", 200], "200", 7])
async def test_twitter_fetcher_treats_non_object_metrics_as_empty(public_metrics) -> None:
    api = FakeTwitterApi({"username": "DpoppDev", "public_metrics": public_metrics})

    result = await TwitterProfileFetcher().fetch(api)

    assert result == Ok(ExternalRecord(username="DpoppDev", metrics={}))


@pytest.mark.asyncio
async def test_fetchers_drop_non_string_usernames() -> None:
    twitter = await TwitterProfileFetcher().fetch(
        FakeTwitterApi({"username": 42, "public_metrics": {"followers_count": 200}})
    )
    github = await GithubProfileFetcher().fetch(FakeGithubApi({"login": ["octocat"], "followers": 60}))

    assert twitter.value.username is None
    assert dict(twitter.value.metrics) == {"followers": 200}
    assert github.value.username is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {"username": 42, "public_metrics": {"followers_count": 200}},
        {"username": "DpoppDev", "public_metrics": ["followers_count", 200]},
    ],
)
async def test_wrongly_shaped_profile_verifies_as_invalid(data) -> None:
    providers = {p.type: p for p in twitter_providers(FixedOAuthClient(FakeTwitterApi(data)))}
    payload = RequestPayload(
        type="TwitterFollowerGT100", proofs={"sessionKey": "twitter-session", "code": "ABC123"}
    )

    verified = await providers["TwitterFollowerGT100"].verify(payload, VerificationContext())

    assert verified == VerifiedPayload.invalid()
