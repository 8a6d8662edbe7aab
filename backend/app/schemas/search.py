from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class StartupSearchResult(BaseModel):
    id: str
    company_name: str
    description: Optional[str] = None
    website: Optional[str] = None
    stage: str
    focus_areas: List[str] = []
    product_types: List[str] = []
    technologies: List[str] = []
    current_goals: List[str] = []
    current_needs: List[str] = []
    funding_status: Optional[str] = None
    team_size: Optional[int] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    founder_first_name: Optional[str] = None
    founder_last_name: Optional[str] = None
    founder_email: Optional[str] = None


class StakeholderSearchResult(BaseModel):
    id: str
    stakeholder_type: str
    organization_name: Optional[str] = None
    contact_email: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    services_offered: List[str] = []
    therapeutic_areas: List[str] = []
    industries: List[str] = []
    capabilities: Optional[str] = None
    created_at: Optional[datetime] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class StartupSearchResponse(BaseModel):
    startups: List[StartupSearchResult]
    pagination: Pagination


class StakeholderSearchResponse(BaseModel):
    stakeholders: List[StakeholderSearchResult]
    pagination: Pagination


class CompanyListResponse(BaseModel):
    companies: List[StartupSearchResult]
    pagination: Pagination
