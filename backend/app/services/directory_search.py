"""
Directory search over startup and stakeholder profiles.

All supplied filters are AND'ed; free text is a case-insensitive substring
match over a fixed set of columns. Results are ordered by creation time and
paginated with a separately counted total.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from app.models import Stakeholder, Startup, User
from app.utils.pagination import (
    COMPANIES_MAX_PAGE_SIZE,
    MAX_PAGE_SIZE,
    build_pagination,
    clamp_limit,
    page_offset,
)
from app.utils.query import any_contains_text, contains_text, json_array_contains

logger = logging.getLogger(__name__)


def _paginate(query, order_by, page: int, limit: int,
              max_limit: int = MAX_PAGE_SIZE) -> Tuple[list, Dict[str, Any]]:
    limit = clamp_limit(limit, max_limit)
    total = query.count()
    rows = query.order_by(order_by).offset(page_offset(page, limit)).limit(limit).all()
    return rows, build_pagination(page, limit, total)


def _startup_result(startup: Startup, user: User) -> Dict[str, Any]:
    return {
        "id": startup.id,
        "company_name": startup.company_name,
        "description": startup.description,
        "website": startup.website,
        "stage": startup.stage,
        "focus_areas": startup.focus_areas or [],
        "product_types": startup.product_types or [],
        "technologies": startup.technologies or [],
        "current_goals": startup.current_goals or [],
        "current_needs": startup.current_needs or [],
        "funding_status": startup.funding_status,
        "team_size": startup.team_size,
        "location": startup.location,
        "created_at": startup.created_at,
        "founder_first_name": user.first_name,
        "founder_last_name": user.last_name,
        "founder_email": user.email,
    }


def search_startups(
    db: Session,
    query: Optional[str] = None,
    focus_area: Optional[str] = None,
    stage: Optional[str] = None,
    funding_status: Optional[str] = None,
    location: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    q = db.query(Startup, User).join(User, Startup.user_id == User.id)

    if query:
        q = q.filter(any_contains_text([Startup.company_name, Startup.description, Startup.location], query))
    if focus_area:
        q = q.filter(json_array_contains(Startup.focus_areas, focus_area))
    if stage:
        q = q.filter(Startup.stage == stage)
    if funding_status:
        q = q.filter(Startup.funding_status == funding_status)
    if location:
        q = q.filter(contains_text(Startup.location, location))

    rows, pagination = _paginate(q, Startup.created_at, page, limit)

    startups = [_startup_result(startup, user) for startup, user in rows]

    logger.info(f"Startup search returned {len(startups)} of {pagination['total']} results")
    return {"startups": startups, "pagination": pagination}


def search_stakeholders(
    db: Session,
    query: Optional[str] = None,
    stakeholder_type: Optional[str] = None,
    therapeutic_area: Optional[str] = None,
    service: Optional[str] = None,
    location: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    q = db.query(Stakeholder, User).join(User, Stakeholder.user_id == User.id)

    if query:
        q = q.filter(any_contains_text(
            [User.first_name, User.last_name, Stakeholder.organization_name,
             Stakeholder.capabilities, Stakeholder.bio],
            query,
        ))
    if stakeholder_type:
        q = q.filter(Stakeholder.stakeholder_type == stakeholder_type)
    if therapeutic_area:
        q = q.filter(json_array_contains(Stakeholder.therapeutic_areas, therapeutic_area))
    if service:
        q = q.filter(json_array_contains(Stakeholder.services_offered, service))
    if location:
        q = q.filter(contains_text(Stakeholder.location, location))

    rows, pagination = _paginate(q, Stakeholder.created_at, page, limit)

    stakeholders = []
    for stakeholder, user in rows:
        stakeholders.append({
            "id": stakeholder.id,
            "stakeholder_type": stakeholder.stakeholder_type,
            "organization_name": stakeholder.organization_name,
            "contact_email": stakeholder.contact_email,
            "website": stakeholder.website,
            "location": stakeholder.location,
            "bio": stakeholder.bio,
            "services_offered": stakeholder.services_offered or [],
            "therapeutic_areas": stakeholder.therapeutic_areas or [],
            "industries": stakeholder.industries or [],
            "capabilities": stakeholder.capabilities,
            "created_at": stakeholder.created_at,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
        })

    logger.info(f"Stakeholder search returned {len(stakeholders)} of {pagination['total']} results")
    return {"stakeholders": stakeholders, "pagination": pagination}


def list_companies(db: Session, page: int = 1, limit: int = 12) -> Dict[str, Any]:
    """Startups whose owners finished onboarding, oldest first, at most 20 per page"""
    q = db.query(Startup, User).join(User, Startup.user_id == User.id).filter(
        User.profile_complete.is_(True)
    )

    rows, pagination = _paginate(q, Startup.created_at, page, limit, COMPANIES_MAX_PAGE_SIZE)
    return {
        "companies": [_startup_result(startup, user) for startup, user in rows],
        "pagination": pagination,
    }
