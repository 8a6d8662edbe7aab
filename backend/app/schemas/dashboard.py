from pydantic import BaseModel
from typing import List, Optional, Union


class StartupStats(BaseModel):
    user_type: str = "startup"
    total_connections: int
    active_connections: int
    pending_requests: int
    completeness_score: int
    company_name: str
    stage: Optional[str] = None
    team_size: Optional[int] = None
    location: Optional[str] = None
    funding_status: Optional[str] = None
    focus_areas: List[str] = []
    current_goals: List[str] = []
    current_needs: List[str] = []


class StakeholderStats(BaseModel):
    user_type: str = "stakeholder"
    total_connections: int
    active_connections: int
    pending_requests: int
    stakeholder_type: str
    organization_name: Optional[str] = None
    location: Optional[str] = None
    services_offered: List[str] = []
    therapeutic_areas: List[str] = []
    industries: List[str] = []


class AdminStats(BaseModel):
    user_type: str = "admin"
    total_users: int
    total_startups: int
    total_stakeholders: int
    total_connections: int


class DashboardStatsResponse(BaseModel):
    stats: Union[StartupStats, StakeholderStats, AdminStats]
