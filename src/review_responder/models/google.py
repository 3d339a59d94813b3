"""
Typed records for Google OAuth and Business Profile payloads

Responses are validated here, at the HTTP boundary, so the services only
ever see these models.
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


STAR_PREFIX = "STAR_"

STAR_WORDS = {
    "ZERO": 0,
    "ONE": 1,
    "TWO": 2,
    "THREE": 3,
    "FOUR": 4,
    "FIVE": 5,
}

_FRACTION = re.compile(r"\.(\d+)")


def star_rating_to_int(value: Optional[str]) -> int:
    """
    Map Google's star rating enum to 0-5

    Accepts "STAR_FOUR", "FOUR" and "STAR_4". Anything unrecognised,
    including STAR_RATING_UNSPECIFIED, maps to 0.
    """
    if not value:
        return 0

    level = value.strip().upper()
    if level.startswith(STAR_PREFIX):
        level = level[len(STAR_PREFIX):]

    if level.isdigit():
        rating = int(level)
    else:
        rating = STAR_WORDS.get(level, 0)

    return rating if 0 <= rating <= 5 else 0


def parse_google_timestamp(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp to naive UTC

    Fractions of any length are accepted; fromisoformat on older
    interpreters only takes exactly 3 or 6 digits.
    """
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class TokenGrant(BaseModel):
    """Body returned by the OAuth token endpoint"""
    model_config = ConfigDict(extra="ignore")

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None


class GoogleReviewer(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    display_name: Optional[str] = Field(None, alias="displayName")


class GoogleReviewReply(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    comment: Optional[str] = None
    update_time: Optional[str] = Field(None, alias="updateTime")


class GoogleReview(BaseModel):
    """A single review as returned by the Business Profile API"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    review_id: str = Field(..., alias="reviewId", min_length=1)
    reviewer: Optional[GoogleReviewer] = None
    star_rating: Optional[str] = Field(None, alias="starRating")
    comment: Optional[str] = None
    create_time: Optional[datetime] = Field(None, alias="createTime")
    review_reply: Optional[GoogleReviewReply] = Field(
        None, validation_alias=AliasChoices("reviewReply", "reply", "review_reply")
    )

    @field_validator("create_time", mode="before")
    @classmethod
    def _parse_create_time(cls, value: Any) -> Any:
        # An unreadable timestamp is dropped, not the whole review
        if isinstance(value, str):
            try:
                return parse_google_timestamp(value)
            except ValueError:
                return None
        return value

    @property
    def author(self) -> Optional[str]:
        return self.reviewer.display_name if self.reviewer else None

    @property
    def rating(self) -> int:
        return star_rating_to_int(self.star_rating)

    @property
    def has_reply(self) -> bool:
        return self.review_reply is not None


class GoogleReviewsPage(BaseModel):
    """
    One page of the reviews listing

    Individual reviews stay raw so that one malformed entry fails on its
    own instead of failing the whole page.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    reviews: List[Dict[str, Any]] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")
    average_rating: Optional[float] = Field(None, alias="averageRating")
    total_review_count: Optional[int] = Field(None, alias="totalReviewCount")
