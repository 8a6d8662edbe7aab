from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List
from datetime import datetime
from pydantic import ConfigDict

from app.models.stakeholder import StakeholderType


class StakeholderOnboardingRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    stakeholder_type: StakeholderType
    organization_name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    services_offered: List[str] = []
    therapeutic_areas: List[str] = []
    industries: List[str] = []
    capabilities: Optional[str] = Field(None, max_length=1000)

    @validator('website')
    def validate_website(cls, v):
        # Empty string is accepted as "no website"
        if v and not v.startswith(('http://', 'https://')):
            raise ValueError('Please enter a valid URL')
        return v or None


class StakeholderUpdate(BaseModel):
    stakeholder_type: Optional[StakeholderType] = None
    organization_name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    services_offered: Optional[List[str]] = None
    therapeutic_areas: Optional[List[str]] = None
    industries: Optional[List[str]] = None
    capabilities: Optional[str] = Field(None, max_length=1000)

    @validator('stakeholder_type', pre=True)
    def not_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v


class StakeholderResponse(BaseModel):
    id: str
    user_id: str
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
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @validator('services_offered', 'therapeutic_areas', 'industries', pre=True)
    def none_as_empty(cls, v):
        return v or []


class StakeholderWithUser(StakeholderResponse):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class StakeholderOnboardingResponse(BaseModel):
    message: str
    user_id: str
    stakeholder: StakeholderResponse
