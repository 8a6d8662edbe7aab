from pydantic import BaseModel
from typing import Any, Dict, List, Optional, Union
from enum import Enum


class ResearchSearchType(str, Enum):
    PI = "pi"
    ORGANIZATION = "organization"
    FOCUS = "focus"
    TEXT = "text"
    RECENT = "recent"
    AWARD = "award"
    STATE = "state"
    CITY = "city"
    REGION = "region"
    LOCATION = "location"
    NEARBY = "nearby"


class TextSearchField(str, Enum):
    PROJECT_TITLE = "projecttitle"
    ABSTRACT = "abstract"
    TERMS = "terms"


class Region(str, Enum):
    SOUTHEAST = "Southeast"
    NORTHEAST = "Northeast"
    WEST_COAST = "West Coast"
    MIDWEST = "Midwest"
    SOUTHWEST = "Southwest"
    MOUNTAIN_WEST = "Mountain West"


class ResearchOrganization(BaseModel):
    name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class ResearchFunding(BaseModel):
    amount: Optional[float] = None
    formatted_amount: str = ""
    fiscal_year: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    formatted_start_date: Optional[str] = None
    formatted_end_date: Optional[str] = None


class ResearchProject(BaseModel):
    id: Optional[str] = None
    project_number: Optional[str] = None
    title: Optional[str] = None
    abstract: str = ""
    principal_investigators: str = ""
    organization: ResearchOrganization
    funding: ResearchFunding
    focus_areas: List[str] = []
    is_medtech: bool = False
    is_active: Optional[bool] = None
    detail_url: Optional[str] = None
    agency: Optional[str] = None
    activity_code: Optional[str] = None


class ResearchPagination(BaseModel):
    total: int
    offset: int
    limit: int
    has_more: bool


class SearchInfo(BaseModel):
    search_id: Optional[Union[str, int]] = None
    type: str
    query: Optional[str] = None


class ResearchProjectsResponse(BaseModel):
    projects: List[ResearchProject]
    pagination: ResearchPagination
    search_info: SearchInfo


class ResearchMatchesResponse(ResearchProjectsResponse):
    strategy: str


class PublicationsResponse(BaseModel):
    publications: List[Dict[str, Any]]
    total: int
    core_project_num: str
