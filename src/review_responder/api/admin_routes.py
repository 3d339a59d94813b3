"""
API Routes for the admin dashboard: companies, reviews, logs and settings
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..models.schemas import (
    CompanyCreate, CompanyUpdate, CompanyResponse,
    DashboardStats,
    IntegrationConfigUpdate, IntegrationStatusResponse,
    LogEntryResponse, LogLevel,
    ReplyPublishRequest, ReviewResponse,
)
from ..services.company_service import company_service
from ..services.config_service import config_service
from ..services.log_service import log_service
from ..services.review_service import review_service

router = APIRouter()


# ========== Companies ==========

@router.get("/companies", response_model=List[CompanyResponse], tags=["Companies"])
def list_companies(skip: int = 0, limit: int = Query(100, le=500), db: Session = Depends(get_db)):
    return company_service.list_companies(db, skip=skip, limit=limit)


@router.post("/companies", response_model=CompanyResponse, tags=["Companies"], status_code=201)
def create_company(company_data: CompanyCreate, db: Session = Depends(get_db)):
    """
    Register a new company

    - **name**: display name
    - **contact_email**: responsible contact
    - **google_place_id** / **google_account_id**: Business Profile identifiers
    - **automation_enabled**: allow AI-drafted replies
    """
    return company_service.create_company(db, company_data)


@router.get("/companies/{company_id}", response_model=CompanyResponse, tags=["Companies"])
def get_company(company_id: str, db: Session = Depends(get_db)):
    company = company_service.get_company(db, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


@router.patch("/companies/{company_id}", response_model=CompanyResponse, tags=["Companies"])
def update_company(company_id: str, update_data: CompanyUpdate, db: Session = Depends(get_db)):
    company = company_service.get_company(db, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company_service.update_company(db, company, update_data)


@router.delete("/companies/{company_id}", status_code=204, tags=["Companies"])
def delete_company(company_id: str, db: Session = Depends(get_db)):
    if not company_service.delete_company(db, company_id):
        raise HTTPException(status_code=404, detail="Company not found")


@router.post("/companies/{company_id}/disconnect", response_model=CompanyResponse, tags=["Companies"])
def disconnect_company(company_id: str, db: Session = Depends(get_db)):
    """Forget the company's Google tokens and mark it disconnected"""
    company = company_service.get_company(db, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company_service.disconnect(db, company)


# ========== Reviews ==========

@router.get("/reviews", response_model=List[ReviewResponse], tags=["Reviews"])
def list_reviews(
    company_id: Optional[str] = None,
    answered: Optional[bool] = None,
    skip: int = 0,
    limit: int = Query(100, le=500),
    db: Session = Depends(get_db),
):
    return review_service.list_reviews(db, company_id=company_id, answered=answered, skip=skip, limit=limit)


@router.get("/reviews/{review_id}", response_model=ReviewResponse, tags=["Reviews"])
def get_review(review_id: str, db: Session = Depends(get_db)):
    review = review_service.get_review(db, review_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    return review


@router.post("/reviews/{review_id}/reply", response_model=ReviewResponse, tags=["Reviews"])
def publish_reply(review_id: str, payload: ReplyPublishRequest, db: Session = Depends(get_db)):
    """Store the operator's (possibly edited) reply and mark the review answered"""
    try:
        return review_service.publish_reply(db, review_id, payload.reply)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ========== Logs ==========

@router.get("/logs", response_model=List[LogEntryResponse], tags=["Logs"])
def list_logs(
    level: Optional[LogLevel] = None,
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    return log_service.list_entries(db, level=level, limit=limit)


# ========== Settings ==========

@router.get("/settings/integrations", response_model=IntegrationStatusResponse, tags=["Settings"])
def get_integrations(db: Session = Depends(get_db)):
    return config_service.status(db)


@router.put("/settings/integrations", response_model=IntegrationStatusResponse, tags=["Settings"])
def update_integrations(update_data: IntegrationConfigUpdate, db: Session = Depends(get_db)):
    config_service.update_config(db, update_data)
    return config_service.status(db)


# ========== Dashboard ==========

@router.get("/dashboard/stats", response_model=DashboardStats, tags=["Dashboard"])
def dashboard_stats(db: Session = Depends(get_db)):
    return DashboardStats(**review_service.stats(db))
