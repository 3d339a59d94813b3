"""
Review Service - Normalization and database operations for reviews
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ResourceNotFoundError
from ..core.logging import get_logger
from ..models.database import Company, Review
from ..models.google import GoogleReview
from .log_service import log_service

logger = get_logger(__name__)


def review_key(company_id: str, external_review_id: str) -> str:
    """Stable primary key for a synced review"""
    return f"{company_id}-{external_review_id}"


@dataclass
class ReviewRecord:
    """A Google review normalized into the columns we store"""
    id: str
    company_id: str
    author: str
    rating: int
    comment: str
    answered: bool
    reply: Optional[str]
    created_at: Optional[datetime]


def normalize_review(company_id: str, review: GoogleReview) -> ReviewRecord:
    """
    Map a Google review onto a storable record

    Missing author becomes the anonymous placeholder, missing comment
    becomes "", and the review counts as answered when Google holds a
    reply for it.
    """
    reply = review.review_reply.comment if review.review_reply else None

    return ReviewRecord(
        id=review_key(company_id, review.review_id),
        company_id=company_id,
        author=review.author or settings.ANONYMOUS_AUTHOR,
        rating=review.rating,
        comment=review.comment or "",
        answered=review.has_reply,
        reply=reply,
        created_at=review.create_time,
    )


class ReviewService:
    """Service for review database operations"""

    @staticmethod
    def upsert(db: Session, record: ReviewRecord) -> Review:
        """
        Insert or overwrite a review by its composite key

        A locally published reply, and its answered flag, is kept when
        Google has none to offer.

        Args:
            db: Database session
            record: Normalized review

        Returns:
            Stored review
        """
        review = db.get(Review, record.id)
        if review is None:
            review = Review(id=record.id, company_id=record.company_id)
            db.add(review)

        review.author = record.author
        review.rating = record.rating
        review.comment = record.comment
        if record.reply is not None:
            review.reply = record.reply
        review.answered = record.answered or review.reply is not None
        review.created_at = record.created_at

        db.commit()
        return review

    @staticmethod
    def get_review(db: Session, review_id: str) -> Optional[Review]:
        return db.get(Review, review_id)

    @staticmethod
    def list_reviews(
        db: Session,
        company_id: Optional[str] = None,
        answered: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Review]:
        """List reviews, newest first"""
        query = db.query(Review)
        if company_id is not None:
            query = query.filter(Review.company_id == company_id)
        if answered is not None:
            query = query.filter(Review.answered == answered)
        return query.order_by(Review.created_at.desc()).offset(skip).limit(limit).all()

    @staticmethod
    def publish_reply(db: Session, review_id: str, reply: str) -> Review:
        """
        Store the operator's reply exactly as submitted and mark the review answered

        Raises:
            ResourceNotFoundError: If the review does not exist
            ValueError: If the reply is blank
        """
        if not reply or not reply.strip():
            raise ValueError("Reply cannot be empty")

        review = db.get(Review, review_id)
        if review is None:
            raise ResourceNotFoundError(f"Review not found: {review_id}")

        review.answered = True
        review.reply = reply

        db.commit()
        db.refresh(review)

        log_service.info(db, f"Reply published for review {review_id}")
        return review

    @staticmethod
    def stats(db: Session) -> dict:
        """Dashboard counters"""
        return {
            "total_companies": db.query(Company).count(),
            "connected_companies": db.query(Company).filter(Company.google_connected == True).count(),  # noqa: E712
            "total_reviews": db.query(Review).count(),
            "answered_reviews": db.query(Review).filter(Review.answered == True).count(),  # noqa: E712
        }


# Create singleton instance
review_service = ReviewService()
