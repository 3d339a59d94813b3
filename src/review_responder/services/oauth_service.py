"""
OAuth Service - Handles Google OAuth authorization URL, code exchange and refresh
"""
import urllib.parse
from typing import Optional

import httpx
from pydantic import ValidationError

from ..core.config import settings
from ..core.exceptions import ResponseDecodeError, TokenRefreshError, UpstreamAPIError
from ..core.logging import get_logger
from ..models.google import TokenGrant
from .http import new_async_client, send_with_retry

logger = get_logger(__name__)


class OAuthService:
    """Service for Google OAuth operations"""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        max_attempts: Optional[int] = None,
        backoff: Optional[float] = None,
    ):
        self.auth_url = settings.GOOGLE_AUTH_URL
        self.token_url = settings.GOOGLE_TOKEN_URL
        self.scope = settings.GOOGLE_SCOPE
        self.http_client = http_client
        self.max_attempts = max_attempts
        self.backoff = backoff

    def build_authorization_url(self, client_id: str, redirect_uri: str, state: str) -> str:
        """
        Build the Google consent screen URL

        Args:
            client_id: OAuth client ID
            redirect_uri: Where Google sends the operator back
            state: Opaque value echoed back by Google (the company ID)

        Returns:
            Authorization URL
        """
        query = urllib.parse.urlencode({
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        })
        return f"{self.auth_url}?{query}"

    async def _post_token(self, payload: dict) -> httpx.Response:
        if self.http_client is not None:
            return await send_with_retry(
                self.http_client, "POST", self.token_url,
                max_attempts=self.max_attempts, backoff=self.backoff, data=payload,
            )
        async with new_async_client() as client:
            return await send_with_retry(
                client, "POST", self.token_url,
                max_attempts=self.max_attempts, backoff=self.backoff, data=payload,
            )

    @staticmethod
    def _decode(response: httpx.Response) -> TokenGrant:
        try:
            return TokenGrant.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ResponseDecodeError(f"Unreadable token response: {str(e)}") from e

    async def exchange_code_for_token(
        self,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
    ) -> TokenGrant:
        """
        Exchange authorization code for access and refresh tokens

        Args:
            code: Authorization code from Google
            client_id: OAuth client ID
            client_secret: OAuth client secret
            redirect_uri: Redirect URI used in authorization

        Returns:
            Token grant from Google

        Raises:
            UpstreamAPIError: If Google rejects the code or cannot be reached
            ResponseDecodeError: If the body is not a token grant
        """
        payload = {
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }

        logger.info(f"Exchanging authorization code for tokens (client_id: {client_id[:20]}...)")

        try:
            response = await self._post_token(payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to exchange code for token: {str(e)}")
            raise UpstreamAPIError(f"Token endpoint unreachable: {str(e)}") from e

        if not response.is_success:
            logger.error(f"Token endpoint returned {response.status_code}: {response.text}")
            raise UpstreamAPIError(
                "Failed to exchange authorization code",
                status_code=response.status_code,
                body=response.text,
            )

        grant = self._decode(response)
        if not grant.access_token:
            raise UpstreamAPIError(
                "Token endpoint returned no access token",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info("Successfully exchanged code for tokens")
        return grant

    async def refresh_access_token(
        self,
        refresh_token: str,
        client_id: str,
        client_secret: str,
    ) -> str:
        """
        Refresh an access token using a refresh token

        Args:
            refresh_token: The refresh token
            client_id: OAuth client ID
            client_secret: OAuth client secret

        Returns:
            New access token

        Raises:
            TokenRefreshError: If no access token comes back, for any reason
        """
        payload = {
            "refresh_token": refresh_token,
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": "refresh_token",
        }

        logger.info(f"Refreshing access token (client_id: {client_id[:20]}...)")

        try:
            response = await self._post_token(payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to refresh token: {str(e)}")
            raise TokenRefreshError(f"Token endpoint unreachable: {str(e)}") from e

        try:
            grant = self._decode(response)
        except ResponseDecodeError as e:
            raise TokenRefreshError(str(e), status_code=response.status_code, body=response.text) from e

        if not response.is_success or not grant.access_token:
            raise TokenRefreshError(
                "Failed to obtain access token",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info("Successfully refreshed access token")
        return grant.access_token
