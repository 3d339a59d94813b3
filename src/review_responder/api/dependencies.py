"""
Injectable collaborators for the routes

Tests replace these through app.dependency_overrides.
"""
from typing import Callable

from ..services.google_api import GoogleAPIClient
from ..services.oauth_service import OAuthService
from ..services.reply_service import ReplyDrafter


def get_oauth_service() -> OAuthService:
    return OAuthService()


def get_google_api() -> GoogleAPIClient:
    return GoogleAPIClient()


def get_reply_drafter_factory() -> Callable[[str], ReplyDrafter]:
    """Drafters are built per request because the API key lives in the database"""
    return ReplyDrafter
