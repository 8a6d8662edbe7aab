from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database.base import get_db
from app.models.user import User
from app.models.startup import StartupStage
from app.models.stakeholder import StakeholderType
from app.schemas.search import StartupSearchResponse, StakeholderSearchResponse
from app.auth.security import get_current_db_user
from app.services.directory_search import search_startups, search_stakeholders
from app.utils.pagination import DEFAULT_PAGE_SIZE

router = APIRouter()

logger = logging.getLogger(__name__)


@router.get("/startups", response_model=StartupSearchResponse)
def search_startup_directory(
        query: Optional[str] = Query(None, description="Matches company name, description or location"),
        focus_area: Optional[str] = None,
        stage: Optional[StartupStage] = None,
        funding_status: Optional[str] = None,
        location: Optional[str] = None,
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, description="Page size, capped at 50"),
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db)
):
    return search_startups(
        db,
        query=query,
        focus_area=focus_area,
        stage=stage.value if stage else None,
        funding_status=funding_status,
        location=location,
        page=page,
        limit=limit,
    )


@router.get("/stakeholders", response_model=StakeholderSearchResponse)
def search_stakeholder_directory(
        query: Optional[str] = Query(None, description="Matches name, organization, capabilities or bio"),
        stakeholder_type: Optional[StakeholderType] = None,
        therapeutic_area: Optional[str] = None,
        service: Optional[str] = None,
        location: Optional[str] = None,
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, description="Page size, capped at 50"),
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db)
):
    return search_stakeholders(
        db,
        query=query,
        stakeholder_type=stakeholder_type.value if stakeholder_type else None,
        therapeutic_area=therapeutic_area,
        service=service,
        location=location,
        page=page,
        limit=limit,
    )
