"""
Company Service - Database operations
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from ..models.database import Company
from ..models.schemas import CompanyCreate, CompanyUpdate
from ..core.logging import get_logger
from .log_service import log_service

logger = get_logger(__name__)


class CompanyService:
    """Service for company database operations"""

    @staticmethod
    def create_company(db: Session, company_data: CompanyCreate) -> Company:
        """
        Create a new company

        Args:
            db: Database session
            company_data: Company creation data

        Returns:
            Created company object
        """
        company = Company(**company_data.model_dump())

        db.add(company)
        db.commit()
        db.refresh(company)

        logger.info(f"Created company id={company.id}")
        return company

    @staticmethod
    def get_company(db: Session, company_id: str) -> Optional[Company]:
        """Get company by ID"""
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def list_companies(db: Session, skip: int = 0, limit: int = 100) -> List[Company]:
        """List companies, newest first"""
        return db.query(Company).order_by(Company.created_at.desc()).offset(skip).limit(limit).all()

    @staticmethod
    def list_connected(db: Session) -> List[Company]:
        """Companies flagged as connected to Google"""
        return db.query(Company).filter(Company.google_connected == True).order_by(Company.created_at).all()  # noqa: E712

    @staticmethod
    def update_company(db: Session, company: Company, update_data: CompanyUpdate) -> Company:
        """
        Update company information

        Args:
            db: Database session
            company: Company to update
            update_data: Update data

        Returns:
            Updated company object
        """
        update_dict = update_data.model_dump(exclude_unset=True)

        for field, value in update_dict.items():
            setattr(company, field, value)

        db.commit()
        db.refresh(company)

        logger.info(f"Updated company id={company.id}")
        return company

    @staticmethod
    def delete_company(db: Session, company_id: str) -> bool:
        """Delete a company and its reviews"""
        company = db.query(Company).filter(Company.id == company_id).first()

        if not company:
            return False

        db.delete(company)
        db.commit()

        logger.info(f"Deleted company id={company_id}")
        return True

    @staticmethod
    def store_tokens(db: Session, company: Company, access_token: str, refresh_token: Optional[str]) -> Company:
        """Persist a fresh OAuth grant and mark the company connected"""
        company.access_token = access_token
        # Google omits the refresh token when re-consenting without prompt=consent
        if refresh_token:
            company.refresh_token = refresh_token
        company.google_connected = True

        db.commit()
        db.refresh(company)

        log_service.info(db, f"Company {company.id} connected to Google")
        return company

    @staticmethod
    def disconnect(db: Session, company: Company) -> Company:
        """Clear both tokens and the connection flag in a single update"""
        company.google_connected = False
        company.access_token = ""
        company.refresh_token = ""

        db.commit()
        db.refresh(company)

        log_service.info(db, f"Company disconnected from Google: {company.id}")
        return company


# Create singleton instance
company_service = CompanyService()
