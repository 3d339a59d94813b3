"""
Shared fixtures: in-memory database, fake Google endpoints, test client
"""
import os

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("HTTP_BACKOFF_SECONDS", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")
# Integration credentials come from the settings table in tests
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""
os.environ["OPENAI_API_KEY"] = ""

import urllib.parse
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from review_responder.api.dependencies import get_google_api, get_oauth_service
from review_responder.api.main import app
from review_responder.core.database import Base, get_db
from review_responder.models.database import Company
from review_responder.models.schemas import IntegrationConfigUpdate
from review_responder.services.config_service import config_service
from review_responder.services.google_api import GoogleAPIClient
from review_responder.services.oauth_service import OAuthService


# Test database setup
TEST_DATABASE_URL = "sqlite://"


def google_review(
    review_id: str,
    star_rating: Optional[str] = "FIVE",
    comment: Optional[str] = "Great service!",
    author: Optional[str] = "John Doe",
    reply: Optional[str] = None,
    create_time: str = "2024-03-01T12:00:00Z",
) -> dict:
    """Review object shaped like the Business Profile API returns it"""
    review = {"reviewId": review_id, "createTime": create_time}
    if star_rating is not None:
        review["starRating"] = star_rating
    if comment is not None:
        review["comment"] = comment
    if author is not None:
        review["reviewer"] = {"displayName": author}
    if reply is not None:
        review["reviewReply"] = {"comment": reply, "updateTime": create_time}
    return review


class FakeGoogle:
    """Stands in for the OAuth token endpoint and the reviews endpoint"""

    def __init__(self):
        self.refresh_grants: Dict[str, Tuple[int, dict]] = {}
        self.code_grants: Dict[str, Tuple[int, dict]] = {}
        self.review_responses: Dict[str, List[Tuple[int, object]]] = {}
        self.requests: List[httpx.Request] = []

    def grant_refresh(self, refresh_token: str, access_token: str = "ya29.fresh") -> None:
        self.refresh_grants[refresh_token] = (200, {"access_token": access_token, "expires_in": 3599})

    def grant_code(self, code: str, access_token: str = "ya29.first", refresh_token: str = "1//refresh") -> None:
        self.code_grants[code] = (
            200,
            {"access_token": access_token, "refresh_token": refresh_token, "expires_in": 3599},
        )

    @staticmethod
    def reviews_path(account_id: str, location_id: str) -> str:
        return f"/v4/accounts/{account_id}/locations/{location_id}/reviews"

    def set_reviews(self, account_id: str, location_id: str, *pages: List[dict]) -> None:
        responses = []
        for index, reviews in enumerate(pages):
            body = {"reviews": reviews, "totalReviewCount": sum(len(p) for p in pages)}
            if index < len(pages) - 1:
                body["nextPageToken"] = str(index + 1)
            responses.append((200, body))
        self.review_responses[self.reviews_path(account_id, location_id)] = responses

    def fail_reviews(self, account_id: str, location_id: str, status: int, body: str) -> None:
        self.review_responses[self.reviews_path(account_id, location_id)] = [(status, body)]

    def review_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/reviews")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host == "oauth2.googleapis.com":
            form = dict(urllib.parse.parse_qsl(request.content.decode()))
            if form.get("grant_type") == "refresh_token":
                status, body = self.refresh_grants.get(
                    form.get("refresh_token"), (400, {"error": "invalid_grant"})
                )
            else:
                status, body = self.code_grants.get(form.get("code"), (400, {"error": "invalid_grant"}))
            return httpx.Response(status, json=body)

        responses = self.review_responses.get(request.url.path)
        if responses is None:
            return httpx.Response(404, json={"error": {"code": 404, "status": "NOT_FOUND"}})

        page_token = request.url.params.get("pageToken")
        status, body = responses[int(page_token) if page_token else 0]
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def db_session():
    """Create a test database session"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def fake_google():
    return FakeGoogle()


@pytest.fixture
def google_http(fake_google):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_google.handler))


@pytest.fixture
def oauth(google_http):
    return OAuthService(http_client=google_http, max_attempts=2, backoff=0)


@pytest.fixture
def google_api(google_http):
    return GoogleAPIClient(http_client=google_http, max_attempts=2, backoff=0)


@pytest.fixture
def google_configured(db_session):
    """Store OAuth client credentials the way the settings screen does"""
    config_service.update_config(
        db_session,
        IntegrationConfigUpdate(google_client_id="client-123.apps.googleusercontent.com", google_client_secret="s3cret"),
    )


@pytest.fixture
def make_company(db_session):
    """Factory for companies; connected with full Google identifiers by default"""

    def _make(**overrides) -> Company:
        fields = {
            "name": "Padaria Central",
            "contact_email": "owner@padaria.example",
            "google_place_id": "loc-1",
            "google_account_id": "acc-1",
            "google_connected": True,
            "access_token": "",
            "refresh_token": "refresh-1",
            "automation_enabled": True,
        }
        fields.update(overrides)
        company = Company(**fields)
        db_session.add(company)
        db_session.commit()
        db_session.refresh(company)
        return company

    return _make


@pytest.fixture
def client(db_session, oauth, google_api):
    """Create test client"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_oauth_service] = lambda: oauth
    app.dependency_overrides[get_google_api] = lambda: google_api

    yield TestClient(app)

    app.dependency_overrides.clear()
