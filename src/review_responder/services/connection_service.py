"""
Connection Service - Connects a company to Google Business Profile
"""
from typing import Optional
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ResourceNotFoundError, ResponseDecodeError, UpstreamAPIError
from ..core.logging import get_logger
from ..models.database import Company
from .company_service import company_service
from .config_service import config_service
from .log_service import log_service
from .oauth_service import OAuthService

logger = get_logger(__name__)


def _require_company(db: Session, company_id: str) -> Company:
    company = company_service.get_company(db, company_id)
    if company is None:
        raise ResourceNotFoundError(f"Company not found: {company_id}")
    return company


def authorization_url(db: Session, oauth: OAuthService, company_id: str, redirect_uri: Optional[str] = None) -> str:
    """
    Consent screen URL carrying the company ID as state

    Raises:
        ResourceNotFoundError: Unknown company
        NotConfiguredError: No OAuth client configured
    """
    _require_company(db, company_id)
    credentials = config_service.google_credentials(db)
    return oauth.build_authorization_url(
        client_id=credentials.client_id,
        redirect_uri=redirect_uri or settings.GOOGLE_REDIRECT_URI,
        state=company_id,
    )


async def connect_company(
    db: Session,
    oauth: OAuthService,
    company_id: str,
    authorization_code: str,
    redirect_uri: Optional[str] = None,
) -> Company:
    """
    Exchange the authorization code on the server and store the tokens

    The client secret never leaves this process.

    Raises:
        ResourceNotFoundError: Unknown company
        NotConfiguredError: No OAuth client configured
        UpstreamAPIError: Google rejected the code
        ResponseDecodeError: Google answered with an unreadable body
    """
    company = _require_company(db, company_id)
    credentials = config_service.google_credentials(db)

    try:
        grant = await oauth.exchange_code_for_token(
            code=authorization_code,
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
            redirect_uri=redirect_uri or settings.GOOGLE_REDIRECT_URI,
        )
    except UpstreamAPIError as e:
        log_service.error(db, f"Google OAuth error: {e.body or e}")
        raise
    except ResponseDecodeError as e:
        log_service.error(db, f"Google OAuth error: {e}")
        raise

    return company_service.store_tokens(db, company, grant.access_token, grant.refresh_token)
