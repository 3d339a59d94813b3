"""
API Routes for Review Responder Service: sync, OAuth and reply drafting
"""
from datetime import datetime
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import NotConfiguredError, ResponseDecodeError, UpstreamAPIError
from ..core.logging import get_logger
from ..models.schemas import (
    GenerateResponseRequest, GenerateResponseResponse,
    HealthCheckResponse,
    OAuthHandlerRequest, SuccessResponse,
    SyncRunResponse,
)
from ..services import connection_service
from ..services.company_service import company_service
from ..services.config_service import config_service
from ..services.google_api import GoogleAPIClient
from ..services.log_service import log_service
from ..services.oauth_service import OAuthService
from ..services.reply_service import ReplyDrafter
from ..services.sync_service import ReviewSynchronizer
from .dependencies import get_google_api, get_oauth_service, get_reply_drafter_factory

logger = get_logger(__name__)

router = APIRouter()


# ========== Health Check ==========

@router.get("/health", response_model=HealthCheckResponse, tags=["General"])
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    try:
        # Test database connection
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        db_status = "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        timestamp=datetime.utcnow(),
        database=db_status,
    )


# ========== Review Sync ==========

@router.post("/sync-google-reviews", response_model=SyncRunResponse, tags=["Sync"])
async def sync_google_reviews(
    db: Session = Depends(get_db),
    oauth: OAuthService = Depends(get_oauth_service),
    google_api: GoogleAPIClient = Depends(get_google_api),
):
    """
    Run one full synchronization pass over every connected company

    Per-company and per-review failures are reported in the body and the
    log; only a failure of the pass itself returns 500.
    """
    synchronizer = ReviewSynchronizer(db, oauth=oauth, google_api=google_api)
    try:
        report = await synchronizer.run()
    except NotConfiguredError:
        raise
    except Exception as e:
        logger.error(f"Review sync failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e) or "Review sync failed")

    return SyncRunResponse(success=True, report=report)


# ========== AI Reply Drafting ==========

@router.post("/generate-response", response_model=GenerateResponseResponse, tags=["Replies"])
async def generate_response(
    payload: GenerateResponseRequest,
    db: Session = Depends(get_db),
    drafter_factory: Callable[[str], ReplyDrafter] = Depends(get_reply_drafter_factory),
):
    """
    Draft a reply for a review

    - **rating**: 1-5 stars
    - **comentario**: review text
    - **empresa_id**: company the review belongs to
    """
    if not payload.rating or not payload.comentario or not payload.empresa_id:
        raise HTTPException(status_code=400, detail="Missing required fields")

    company = company_service.get_company(db, payload.empresa_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")

    if not company.automation_enabled:
        raise HTTPException(status_code=400, detail="Automation is disabled for this company")

    drafter = drafter_factory(config_service.openai_api_key(db))

    try:
        draft = await drafter.draft(payload.rating, payload.comentario)
    except UpstreamAPIError as e:
        log_service.error(db, f"Error generating response with OpenAI: {e.body or e}")
        raise HTTPException(status_code=500, detail="Failed to generate response")

    log_service.info(db, f"Response generated for company {payload.empresa_id}")
    return GenerateResponseResponse(response=draft)


# ========== OAuth Flow ==========

@router.get("/oauth/google/authorize/{company_id}", tags=["OAuth"])
def oauth_authorize_redirect(
    company_id: str,
    db: Session = Depends(get_db),
    oauth: OAuthService = Depends(get_oauth_service),
):
    """
    Browser redirect endpoint to start OAuth flow

    Redirects to the Google consent screen with the company ID as state.
    """
    url = connection_service.authorization_url(db, oauth, company_id)
    logger.info(f"OAuth login redirect for company_id={company_id}")
    return RedirectResponse(url)


async def _connect(db: Session, oauth: OAuthService, company_id: str, code: str) -> SuccessResponse:
    try:
        await connection_service.connect_company(db, oauth, company_id, code)
    except (UpstreamAPIError, ResponseDecodeError):
        raise HTTPException(status_code=500, detail="Failed to exchange authorization code")

    logger.info(f"OAuth connection completed for company_id={company_id}")
    return SuccessResponse(success=True)


@router.post("/google-oauth-handler", response_model=SuccessResponse, tags=["OAuth"])
async def google_oauth_handler(
    payload: OAuthHandlerRequest,
    db: Session = Depends(get_db),
    oauth: OAuthService = Depends(get_oauth_service),
):
    """
    Exchange an authorization code for tokens and connect the company

    - **empresa_id**: company ID received back as OAuth state
    - **authorization_code**: code received from Google
    """
    if not payload.empresa_id or not payload.authorization_code:
        raise HTTPException(status_code=400, detail="Missing required fields")

    return await _connect(db, oauth, payload.empresa_id, payload.authorization_code)


@router.get("/oauth/google/callback", response_model=SuccessResponse, tags=["OAuth"])
async def oauth_callback(
    request: Request,
    db: Session = Depends(get_db),
    oauth: OAuthService = Depends(get_oauth_service),
):
    """
    OAuth callback endpoint

    Google redirects here after user authorization, with the company ID
    echoed back as state.
    """
    code: Optional[str] = request.query_params.get("code")
    state: Optional[str] = request.query_params.get("state")
    error = request.query_params.get("error")

    # Check for Google OAuth errors
    if error:
        logger.error(f"OAuth error from Google: {error}")
        raise HTTPException(status_code=400, detail=f"Google OAuth error: {error}")

    if not code or not state:
        raise HTTPException(status_code=400, detail="Missing code or state parameter")

    return await _connect(db, oauth, state, code)
