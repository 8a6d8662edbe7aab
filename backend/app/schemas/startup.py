from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime
from pydantic import ConfigDict

from app.models.startup import StartupStage
from app.utils.constants import REGULATORY_STATUSES, NIH_FUNDING_INTEREST


def _check_regulatory_status(v):
    if v is not None and v not in REGULATORY_STATUSES:
        raise ValueError(f'Regulatory status must be one of: {", ".join(REGULATORY_STATUSES)}')
    return v


def _check_nih_funding_interest(v):
    if v is not None and v not in NIH_FUNDING_INTEREST:
        raise ValueError(f'NIH funding interest must be one of: {", ".join(NIH_FUNDING_INTEREST)}')
    return v


# Onboarding form
class StartupOnboardingRequest(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=30, max_length=1000)
    stage: StartupStage
    focus_areas: List[str] = Field(..., min_length=1)
    product_types: List[str] = Field(..., min_length=1)
    technologies: List[str] = Field(..., min_length=1)
    regulatory_status: Optional[str] = None
    needs_clinical_trials: bool = False
    nih_funding_interest: Optional[str] = None
    business_needs: List[str] = []
    keywords: List[str] = []
    website: Optional[str] = Field(None, max_length=500)
    funding_status: Optional[str] = Field(None, max_length=100)
    team_size: Optional[int] = Field(None, gt=0)
    location: Optional[str] = Field(None, max_length=100)
    current_goals: Optional[List[str]] = None
    current_needs: Optional[List[str]] = None
    milestones: Optional[List[dict]] = None
    # Optional user fields collected on the same form
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)

    @validator('company_name', 'description')
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Field cannot be blank')
        return v

    @validator('regulatory_status')
    def validate_regulatory_status(cls, v):
        return _check_regulatory_status(v)

    @validator('nih_funding_interest')
    def validate_nih_funding_interest(cls, v):
        return _check_nih_funding_interest(v)


class StartupUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    website: Optional[str] = Field(None, max_length=500)
    stage: Optional[StartupStage] = None
    focus_areas: Optional[List[str]] = None
    product_types: Optional[List[str]] = None
    technologies: Optional[List[str]] = None
    regulatory_status: Optional[str] = None
    needs_clinical_trials: Optional[bool] = None
    nih_funding_interest: Optional[str] = None
    business_needs: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    current_goals: Optional[List[str]] = None
    current_needs: Optional[List[str]] = None
    milestones: Optional[List[dict]] = None
    funding_status: Optional[str] = Field(None, max_length=100)
    team_size: Optional[int] = Field(None, gt=0)
    location: Optional[str] = Field(None, max_length=100)

    @validator('company_name', 'stage', pre=True)
    def not_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v

    @validator('regulatory_status')
    def validate_regulatory_status(cls, v):
        return _check_regulatory_status(v)

    @validator('nih_funding_interest')
    def validate_nih_funding_interest(cls, v):
        return _check_nih_funding_interest(v)


class StartupResponse(BaseModel):
    id: str
    user_id: str
    company_name: str
    description: Optional[str] = None
    website: Optional[str] = None
    stage: str
    focus_areas: List[str] = []
    product_types: List[str] = []
    technologies: List[str] = []
    regulatory_status: Optional[str] = None
    needs_clinical_trials: Optional[bool] = None
    nih_funding_interest: Optional[str] = None
    business_needs: List[str] = []
    keywords: List[str] = []
    current_goals: List[str] = []
    current_needs: List[str] = []
    milestones: List[dict] = []
    funding_status: Optional[str] = None
    team_size: Optional[int] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @validator('focus_areas', 'product_types', 'technologies', 'business_needs', 'keywords',
               'current_goals', 'current_needs', 'milestones', pre=True)
    def none_as_empty(cls, v):
        return v or []


class StartupWithUser(StartupResponse):
    """Startup profile joined with the owning user's display fields"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class StartupOnboardingResponse(BaseModel):
    message: str
    startup: StartupResponse
    redirect_to: str = "/dashboard"
