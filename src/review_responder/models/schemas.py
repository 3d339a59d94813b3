"""
Pydantic schemas for API requests and responses
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator


# ========== Company Schemas ==========

class CompanyBase(BaseModel):
    """Base schema for company"""
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    contact_email: str = Field("", max_length=255, description="Responsible contact")
    google_place_id: str = Field("", max_length=255, description="Google Business Profile location ID")
    google_account_id: str = Field("", max_length=255, description="Google Business Profile account ID")
    automation_enabled: bool = Field(False, description="Allow AI-drafted replies")


class CompanyCreate(CompanyBase):
    """Schema for creating a new company"""


class CompanyUpdate(BaseModel):
    """Schema for updating company"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_email: Optional[str] = Field(None, max_length=255)
    google_place_id: Optional[str] = Field(None, max_length=255)
    google_account_id: Optional[str] = Field(None, max_length=255)
    automation_enabled: Optional[bool] = None

    @field_validator(
        "name", "contact_email", "google_place_id", "google_account_id", "automation_enabled",
        mode="before",
    )
    @classmethod
    def _reject_null(cls, value):
        # Omit a field to leave it unchanged; the columns are NOT NULL
        if value is None:
            raise ValueError("must not be null")
        return value


class CompanyResponse(CompanyBase):
    """Schema for company response (credentials are never returned)"""
    id: str
    google_connected: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ========== Review Schemas ==========

class ReviewResponse(BaseModel):
    """Schema for review response"""
    id: str
    company_id: str
    author: str
    rating: int
    comment: str
    answered: bool
    reply: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ReplyPublishRequest(BaseModel):
    """Schema for publishing a (possibly edited) reply"""
    reply: str = Field(..., description="Reply text, stored exactly as submitted")


# ========== Log Schemas ==========

class LogLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogEntryResponse(BaseModel):
    """Schema for log entry response"""
    id: int
    level: LogLevel
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ========== Integration Settings Schemas ==========

class IntegrationConfigUpdate(BaseModel):
    """Schema for updating integration credentials"""
    google_client_id: Optional[str] = Field(None, max_length=255)
    google_client_secret: Optional[str] = Field(None, max_length=512)
    openai_api_key: Optional[str] = Field(None, max_length=512)


class IntegrationStatusResponse(BaseModel):
    """Schema for integration status, secrets masked"""
    google_configured: bool
    openai_configured: bool
    google_client_id: str = ""
    google_client_secret: str = ""
    openai_api_key: str = ""
    updated_at: Optional[datetime] = None


# ========== AI Reply Schemas ==========

class GenerateResponseRequest(BaseModel):
    """Schema for drafting a reply; field names follow the dashboard's payload"""
    rating: Optional[int] = None
    comentario: Optional[str] = None
    empresa_id: Optional[str] = None


class GenerateResponseResponse(BaseModel):
    """Schema for drafted reply"""
    response: str


# ========== OAuth Schemas ==========

class OAuthHandlerRequest(BaseModel):
    """Schema for completing the Google OAuth connection"""
    empresa_id: Optional[str] = None
    authorization_code: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True


# ========== Sync Schemas ==========

class SyncStage(str, Enum):
    """Per-company progress through a sync pass"""
    PENDING = "pending"
    VALIDATING = "validating"
    REFRESHING = "refreshing"
    FETCHING = "fetching"
    UPSERTING = "upserting"
    DONE = "done"


class SyncStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class ReviewUpsertResult(BaseModel):
    """Outcome of storing one fetched review"""
    review_id: str
    status: SyncStatus
    error: Optional[str] = None


class CompanySyncResult(BaseModel):
    """Outcome of syncing one company"""
    company_id: str
    company_name: str
    status: SyncStatus = SyncStatus.SUCCESS
    stage: SyncStage = SyncStage.PENDING
    reason: Optional[str] = None
    reviews: List[ReviewUpsertResult] = Field(default_factory=list)

    @property
    def upserted(self) -> int:
        return sum(1 for r in self.reviews if r.status == SyncStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.reviews if r.status == SyncStatus.FAILED)


class SyncReport(BaseModel):
    """Aggregated outcome of one batch"""
    started_at: datetime
    finished_at: Optional[datetime] = None
    companies: List[CompanySyncResult] = Field(default_factory=list)

    def count(self, status: SyncStatus) -> int:
        return sum(1 for c in self.companies if c.status == status)

    def summary(self) -> dict:
        return {
            "companies": len(self.companies),
            "synced": self.count(SyncStatus.SUCCESS),
            "skipped": self.count(SyncStatus.SKIPPED),
            "failed": self.count(SyncStatus.FAILED),
            "reviews_upserted": sum(c.upserted for c in self.companies),
            "reviews_failed": sum(c.failed for c in self.companies),
        }


class SyncRunResponse(BaseModel):
    """Schema for a completed sync pass"""
    success: bool = True
    report: SyncReport


# ========== General Schemas ==========

class DashboardStats(BaseModel):
    """Schema for dashboard counters"""
    total_companies: int
    connected_companies: int
    total_reviews: int
    answered_reviews: int


class HealthCheckResponse(BaseModel):
    """Schema for health check response"""
    status: str = "healthy"
    service: str = "review-responder-service"
    version: str = "1.0.0"
    timestamp: datetime
    database: str = "connected"
