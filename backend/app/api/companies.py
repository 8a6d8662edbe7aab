from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from app.database.base import get_db
from app.models.user import User
from app.schemas.search import CompanyListResponse
from app.auth.security import get_current_db_user
from app.services.directory_search import list_companies
from app.utils.pagination import COMPANIES_DEFAULT_PAGE_SIZE

router = APIRouter()

logger = logging.getLogger(__name__)


@router.get("", response_model=CompanyListResponse)
def list_company_directory(
        page: int = Query(1, ge=1),
        limit: int = Query(COMPANIES_DEFAULT_PAGE_SIZE, ge=1, description="Page size, capped at 20"),
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db)
):
    """Browse startups that have completed onboarding"""
    return list_companies(db, page=page, limit=limit)
