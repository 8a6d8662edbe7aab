from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional
import logging

from app.database.base import get_db
from app.models.user import User, UserType
from app.models.startup import Startup
from app.schemas.research import (
    ResearchSearchType, TextSearchField, Region,
    ResearchProjectsResponse, ResearchMatchesResponse, PublicationsResponse
)
from app.auth.security import get_current_user, check_role
from app.services.errors import NotFoundError, UpstreamServiceError
from app.services.research_matching import find_research_matches
from app.utils.nih_reporter import NIHReporterClient, NIHReporterError, get_nih_client, shape_project_response

router = APIRouter()

logger = logging.getLogger(__name__)


def _split(value: Optional[str]) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def _require(value, message: str):
    if value is None or value == "" or value == []:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
    return value


def _external_api_error(e: NIHReporterError) -> UpstreamServiceError:
    return UpstreamServiceError("External API error", status_code=502, payload={"message": str(e)})


def _run_search(client: NIHReporterClient, search_type: ResearchSearchType, query: Optional[str],
                field: TextSearchField, limit: int, min_amount: Optional[float], max_amount: Optional[float],
                states: Optional[str], cities: Optional[str], region: Optional[Region],
                focus_area: Optional[str], include_adjacent: bool) -> Dict[str, Any]:
    if search_type == ResearchSearchType.PI:
        return client.search_projects_by_pi(_require(query, "Query parameter required for PI search"), limit)

    if search_type == ResearchSearchType.ORGANIZATION:
        return client.search_projects_by_organization(
            _require(query, "Query parameter required for organization search"), limit
        )

    if search_type == ResearchSearchType.FOCUS:
        return client.search_projects_by_focus_area(
            _require(query, "Query parameter required for focus area search"), limit
        )

    if search_type == ResearchSearchType.TEXT:
        search_field = "abstract" if field == TextSearchField.ABSTRACT else "projecttitle"
        return client.search_projects_by_text(
            _require(query, "Query parameter required for text search"), search_field, limit
        )

    if search_type == ResearchSearchType.RECENT:
        return client.get_recent_projects(limit)

    if search_type == ResearchSearchType.AWARD:
        if min_amount is None or max_amount is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="min_amount and max_amount parameters required for award search"
            )
        return client.search_projects_by_award_amount(min_amount, max_amount, limit)

    if search_type == ResearchSearchType.STATE:
        return client.search_projects_by_state(
            _require(_split(states), "States parameter required for state search"), limit=limit
        )

    if search_type == ResearchSearchType.CITY:
        return client.search_projects_by_city(
            _require(_split(cities), "Cities parameter required for city search"), limit=limit
        )

    if search_type == ResearchSearchType.REGION:
        region = _require(region, "Region parameter required for region search")
        return client.search_projects_by_region(region.value, limit=limit)

    if search_type == ResearchSearchType.LOCATION:
        state_list, city_list = _split(states), _split(cities)
        if not state_list and not city_list:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Either states or cities parameter required for location search"
            )
        return client.search_projects_by_location(state_list, city_list, focus_area or None, limit)

    # nearby
    reference_state = _require(query, "Query parameter (reference state) required for nearby search")
    return client.search_nearby_projects(reference_state, focus_area or None, include_adjacent, limit)


@router.get("/projects", response_model=ResearchProjectsResponse)
def search_research_projects(
        type: ResearchSearchType = ResearchSearchType.TEXT,
        query: Optional[str] = None,
        field: TextSearchField = TextSearchField.PROJECT_TITLE,
        limit: int = Query(20, ge=1, le=100),
        offset: int = Query(0, ge=0),
        min_amount: Optional[float] = Query(None, ge=0),
        max_amount: Optional[float] = Query(None, ge=0),
        states: Optional[str] = Query(None, description="Comma-separated state codes"),
        cities: Optional[str] = Query(None, description="Comma-separated city names"),
        region: Optional[Region] = None,
        focus_area: Optional[str] = Query(None, description="Focus area combined with location searches"),
        include_adjacent: bool = False,
        current_user: Dict[str, Any] = Depends(get_current_user),
        client: NIHReporterClient = Depends(get_nih_client)
):
    """
    Search NIH RePORTER projects.

    Types: pi, organization, focus, text, recent, award, state, city, region,
    location, nearby. Requests to NIH are limited to one per second across the
    process; callers are delayed rather than rejected.
    """
    try:
        response = _run_search(client, type, query, field, limit, min_amount, max_amount,
                               states, cities, region, focus_area, include_adjacent)
    except NIHReporterError as e:
        raise _external_api_error(e)

    return shape_project_response(response, offset, limit, type.value, query)


@router.get("/publications", response_model=PublicationsResponse)
def get_project_publications(
        core_project_num: str = Query(..., min_length=1),
        limit: int = Query(20, ge=1, le=100),
        current_user: Dict[str, Any] = Depends(get_current_user),
        client: NIHReporterClient = Depends(get_nih_client)
):
    try:
        response = client.get_project_publications(core_project_num, limit)
    except NIHReporterError as e:
        raise _external_api_error(e)

    return {
        "publications": response.get("results") or [],
        "total": (response.get("meta") or {}).get("total", 0),
        "core_project_num": core_project_num,
    }


@router.get("/matches", response_model=ResearchMatchesResponse)
def get_research_matches(
        user: User = Depends(check_role(UserType.STARTUP)),
        db: Session = Depends(get_db),
        client: NIHReporterClient = Depends(get_nih_client)
):
    """NIH projects relevant to the caller's startup profile, from a single NIH request"""
    startup = db.query(Startup).filter(Startup.user_id == user.id).first()
    if not startup:
        raise NotFoundError("Startup profile not found")

    try:
        return find_research_matches(client, startup)
    except NIHReporterError as e:
        raise _external_api_error(e)
