"""
Google Business Profile reviews client
"""
from typing import List, Optional

import httpx
from pydantic import ValidationError

from ..core.config import settings
from ..core.exceptions import ResponseDecodeError, UpstreamAPIError
from ..core.logging import get_logger
from ..models.google import GoogleReviewsPage
from .http import new_async_client, send_with_retry

logger = get_logger(__name__)


def _resource_id(value: str, collection: str) -> str:
    """Accept either a bare ID or a resource name such as "accounts/123" """
    prefix = f"{collection}/"
    value = value.strip()
    return value[len(prefix):] if value.startswith(prefix) else value


class GoogleAPIClient:
    """Fetches reviews for a Business Profile location"""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
        max_attempts: Optional[int] = None,
        backoff: Optional[float] = None,
    ):
        self.http_client = http_client
        self.base_url = (base_url or settings.GOOGLE_REVIEWS_API_URL).rstrip("/")
        self.page_size = page_size or settings.GOOGLE_REVIEWS_PAGE_SIZE
        self.max_pages = max_pages or settings.GOOGLE_REVIEWS_MAX_PAGES
        self.max_attempts = max_attempts
        self.backoff = backoff

    def reviews_url(self, account_id: str, location_id: str) -> str:
        return (
            f"{self.base_url}/accounts/{_resource_id(account_id, 'accounts')}"
            f"/locations/{_resource_id(location_id, 'locations')}/reviews"
        )

    async def _get_page(
        self,
        client: httpx.AsyncClient,
        url: str,
        access_token: str,
        page_token: Optional[str],
    ) -> GoogleReviewsPage:
        params = {"pageSize": self.page_size}
        if page_token:
            params["pageToken"] = page_token

        try:
            response = await send_with_retry(
                client, "GET", url,
                max_attempts=self.max_attempts, backoff=self.backoff,
                params=params,
                headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise UpstreamAPIError(f"Reviews endpoint unreachable: {str(e)}") from e

        if not response.is_success:
            raise UpstreamAPIError(
                f"Reviews endpoint returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return GoogleReviewsPage.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ResponseDecodeError(f"Unreadable reviews response: {str(e)}") from e

    async def list_reviews(self, account_id: str, location_id: str, access_token: str) -> List[dict]:
        """
        Fetch every review of a location, following nextPageToken

        Args:
            account_id: Business Profile account ID
            location_id: Business Profile location ID
            access_token: Bearer token for the owning Google account

        Returns:
            Raw review objects, validated individually by the caller

        Raises:
            UpstreamAPIError: On a non-2xx status (carries the response body)
            ResponseDecodeError: If a 2xx body is not a reviews page, or
                pagination repeats a token or runs past max_pages
        """
        url = self.reviews_url(account_id, location_id)
        reviews: List[dict] = []
        page_token = None

        if self.http_client is not None:
            client = self.http_client
            owns_client = False
        else:
            client = new_async_client()
            owns_client = True

        seen_tokens = set()
        pages = 0

        try:
            while True:
                page = await self._get_page(client, url, access_token, page_token)
                pages += 1
                reviews.extend(page.reviews)
                page_token = page.next_page_token
                if not page_token:
                    break
                if page_token in seen_tokens:
                    raise ResponseDecodeError(f"Reviews pagination repeated page token {page_token!r}")
                if pages >= self.max_pages:
                    raise ResponseDecodeError(f"Reviews pagination exceeded {self.max_pages} pages")
                seen_tokens.add(page_token)
        finally:
            if owns_client:
                await client.aclose()

        logger.info(f"Fetched {len(reviews)} reviews for location {location_id}")
        return reviews
