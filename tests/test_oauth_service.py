"""
Tests for the Google OAuth and reviews HTTP clients
"""
import urllib.parse

import httpx
import pytest

from review_responder.core.exceptions import ResponseDecodeError, TokenRefreshError, UpstreamAPIError
from review_responder.services.google_api import GoogleAPIClient
from review_responder.services.oauth_service import OAuthService


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestAuthorizationUrl:

    def test_carries_company_as_state(self):
        url = OAuthService().build_authorization_url(
            client_id="client-123", redirect_uri="http://localhost:8003/oauth/google/callback", state="company-9"
        )

        parsed = urllib.parse.urlparse(url)
        query = dict(urllib.parse.parse_qsl(parsed.query))
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://accounts.google.com/o/oauth2/v2/auth"
        assert query == {
            "client_id": "client-123",
            "redirect_uri": "http://localhost:8003/oauth/google/callback",
            "response_type": "code",
            "scope": "https://www.googleapis.com/auth/business.manage",
            "access_type": "offline",
            "prompt": "consent",
            "state": "company-9",
        }


class TestTokenRefresh:

    @pytest.mark.asyncio
    async def test_returns_access_token(self):
        seen = {}

        def handler(request):
            seen.update(urllib.parse.parse_qsl(request.content.decode()))
            return httpx.Response(200, json={"access_token": "ya29.new", "expires_in": 3599})

        oauth = OAuthService(http_client=_client(handler), backoff=0)

        token = await oauth.refresh_access_token("1//refresh", "client-123", "s3cret")

        assert token == "ya29.new"
        assert seen == {
            "refresh_token": "1//refresh",
            "client_id": "client-123",
            "client_secret": "s3cret",
            "grant_type": "refresh_token",
        }

    @pytest.mark.asyncio
    async def test_missing_access_token_raises(self):
        oauth = OAuthService(
            http_client=_client(lambda request: httpx.Response(200, json={"token_type": "Bearer"})), backoff=0
        )

        with pytest.raises(TokenRefreshError):
            await oauth.refresh_access_token("1//refresh", "client-123", "s3cret")

    @pytest.mark.asyncio
    async def test_rejected_grant_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"error": "invalid_grant"})

        oauth = OAuthService(http_client=_client(handler), max_attempts=3, backoff=0)

        with pytest.raises(TokenRefreshError) as exc_info:
            await oauth.refresh_access_token("1//refresh", "client-123", "s3cret")

        assert exc_info.value.status_code == 400
        assert "invalid_grant" in exc_info.value.body
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        responses = [
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, json={"access_token": "ya29.after-retry"}),
        ]

        oauth = OAuthService(http_client=_client(lambda request: responses.pop(0)), max_attempts=3, backoff=0)

        assert await oauth.refresh_access_token("1//refresh", "client-123", "s3cret") == "ya29.after-retry"
        assert responses == []

    @pytest.mark.asyncio
    async def test_connection_error_becomes_refresh_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        oauth = OAuthService(http_client=_client(handler), max_attempts=2, backoff=0)

        with pytest.raises(TokenRefreshError):
            await oauth.refresh_access_token("1//refresh", "client-123", "s3cret")


class TestCodeExchange:

    @pytest.mark.asyncio
    async def test_exchange_returns_grant(self):
        def handler(request):
            form = dict(urllib.parse.parse_qsl(request.content.decode()))
            assert form["grant_type"] == "authorization_code"
            assert form["code"] == "4/abc"
            return httpx.Response(200, json={"access_token": "ya29.a", "refresh_token": "1//r", "expires_in": 3599})

        oauth = OAuthService(http_client=_client(handler), backoff=0)

        grant = await oauth.exchange_code_for_token("4/abc", "client-123", "s3cret", "http://localhost/cb")

        assert grant.access_token == "ya29.a"
        assert grant.refresh_token == "1//r"

    @pytest.mark.asyncio
    async def test_exchange_failure_keeps_body(self):
        oauth = OAuthService(
            http_client=_client(lambda request: httpx.Response(400, json={"error": "redirect_uri_mismatch"})),
            backoff=0,
        )

        with pytest.raises(UpstreamAPIError) as exc_info:
            await oauth.exchange_code_for_token("4/abc", "client-123", "s3cret", "http://localhost/cb")

        assert "redirect_uri_mismatch" in exc_info.value.body


class TestReviewsClient:

    def test_accepts_resource_names(self):
        client = GoogleAPIClient(base_url="https://mybusiness.googleapis.com/v4")

        assert client.reviews_url("accounts/123", "locations/456") == client.reviews_url("123", "456")
        assert client.reviews_url("123", "456") == (
            "https://mybusiness.googleapis.com/v4/accounts/123/locations/456/reviews"
        )

    @pytest.mark.asyncio
    async def test_non_json_success_is_a_decode_error(self):
        client = GoogleAPIClient(
            http_client=_client(lambda request: httpx.Response(200, text="not json")), backoff=0
        )

        with pytest.raises(ResponseDecodeError):
            await client.list_reviews("1", "2", "ya29.token")

    @pytest.mark.asyncio
    async def test_repeated_page_token_stops_paging(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"reviews": [{"reviewId": "r1"}], "nextPageToken": "same"})

        client = GoogleAPIClient(http_client=_client(handler), backoff=0)

        with pytest.raises(ResponseDecodeError, match="repeated page token"):
            await client.list_reviews("1", "2", "ya29.token")

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_page_cap_stops_paging(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"reviews": [], "nextPageToken": f"page-{len(calls)}"})

        client = GoogleAPIClient(http_client=_client(handler), max_pages=3, backoff=0)

        with pytest.raises(ResponseDecodeError, match="exceeded 3 pages"):
            await client.list_reviews("1", "2", "ya29.token")

        assert len(calls) == 3
