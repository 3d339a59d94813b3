"""
Review Sync Service - Pulls Google reviews for every connected company

Companies are processed one after another. A company that cannot be
validated, refreshed or fetched is skipped with a log entry; a review that
cannot be stored is logged and the rest of the batch carries on. Nothing
is retried at this level: a skipped company waits for the next run.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ResponseDecodeError, TokenRefreshError, UpstreamAPIError
from ..core.logging import get_logger
from ..models.database import Company
from ..models.google import GoogleReview
from ..models.schemas import (
    CompanySyncResult, LogLevel, ReviewUpsertResult,
    SyncReport, SyncStage, SyncStatus,
)
from .company_service import company_service
from .config_service import GoogleCredentials, config_service
from .google_api import GoogleAPIClient
from .log_service import log_service
from .oauth_service import OAuthService
from .review_service import ReviewService, normalize_review, review_service

logger = get_logger(__name__)


class ReviewSynchronizer:
    """One batch over all companies connected to Google"""

    def __init__(
        self,
        db: Session,
        oauth: Optional[OAuthService] = None,
        google_api: Optional[GoogleAPIClient] = None,
        reviews: Optional[ReviewService] = None,
    ):
        self.db = db
        self.oauth = oauth or OAuthService()
        self.google_api = google_api or GoogleAPIClient()
        self.reviews = reviews or review_service

    async def run(self) -> SyncReport:
        """
        Sync every connected company

        Raises:
            NotConfiguredError: If the Google OAuth client is not configured
        """
        report = SyncReport(started_at=datetime.utcnow())
        logger.info("Starting review sync")

        credentials = config_service.google_credentials(self.db)
        companies = company_service.list_connected(self.db)
        if not companies:
            logger.info("No companies connected to Google")

        for company in companies:
            report.companies.append(await self.sync_company(company, credentials))

        report.finished_at = datetime.utcnow()
        summary = report.summary()
        log_service.info(
            self.db,
            f"Review sync finished: {summary['synced']} synced, {summary['skipped']} skipped, "
            f"{summary['failed']} with failures, {summary['reviews_upserted']} reviews stored",
        )
        return report

    def _skip(self, result: CompanySyncResult, level: LogLevel, message: str) -> CompanySyncResult:
        result.status = SyncStatus.SKIPPED
        result.reason = message
        log_service.record(self.db, level, message)
        return result

    async def sync_company(self, company: Company, credentials: GoogleCredentials) -> CompanySyncResult:
        company_id = company.id
        name = company.name
        result = CompanySyncResult(company_id=company_id, company_name=name)

        result.stage = SyncStage.VALIDATING
        missing = [
            label for label, value in (
                ("place id", company.google_place_id),
                ("refresh token", company.refresh_token),
                ("account id", company.google_account_id),
            )
            if not value
        ]
        if missing:
            return self._skip(
                result, LogLevel.WARNING,
                f"Skipping company {name}: missing {', '.join(missing)}",
            )

        result.stage = SyncStage.REFRESHING
        try:
            access_token = await self.oauth.refresh_access_token(
                refresh_token=company.refresh_token,
                client_id=credentials.client_id,
                client_secret=credentials.client_secret,
            )
        except TokenRefreshError as e:
            return self._skip(
                result, LogLevel.ERROR,
                f"Skipping company {name}: failed to obtain access token: {e.body or e}",
            )

        result.stage = SyncStage.FETCHING
        try:
            raw_reviews = await self.google_api.list_reviews(
                account_id=company.google_account_id,
                location_id=company.google_place_id,
                access_token=access_token,
            )
        except UpstreamAPIError as e:
            return self._skip(
                result, LogLevel.ERROR,
                f"Skipping company {name}: error fetching reviews ({e.status_code}): {e.body or e}",
            )
        except ResponseDecodeError as e:
            return self._skip(result, LogLevel.ERROR, f"Skipping company {name}: {e}")

        result.stage = SyncStage.UPSERTING
        for item in raw_reviews:
            result.reviews.append(self._store(company_id, item))

        result.stage = SyncStage.DONE
        if result.failed:
            result.status = SyncStatus.FAILED
            result.reason = f"{result.failed} of {len(result.reviews)} reviews could not be stored"

        logger.info(f"Company {name} synced: {result.upserted} reviews stored, {result.failed} failed")
        return result

    def _store(self, company_id: str, item: Any) -> ReviewUpsertResult:
        external_id = str(item.get("reviewId") or "") if isinstance(item, dict) else ""

        try:
            review = GoogleReview.model_validate(item)
        except ValidationError as e:
            message = f"Unreadable review {external_id or '<no id>'} for company {company_id}: {e.error_count()} invalid fields"
            log_service.error(self.db, message)
            return ReviewUpsertResult(review_id=external_id, status=SyncStatus.FAILED, error=message)

        record = normalize_review(company_id, review)
        try:
            self.reviews.upsert(self.db, record)
        except SQLAlchemyError as e:
            self.db.rollback()
            message = f"Failed to store review {record.id}: {str(e)}"
            log_service.error(self.db, message)
            return ReviewUpsertResult(review_id=record.id, status=SyncStatus.FAILED, error=message)

        return ReviewUpsertResult(review_id=record.id, status=SyncStatus.SUCCESS)
