from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from datetime import datetime
from pydantic import ConfigDict

from app.models.user import UserType


class UserBase(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    user_type: UserType = UserType.STARTUP


class UserCreate(UserBase):

    @validator('user_type')
    def validate_user_type(cls, v):
        # Admins are provisioned out of band
        if v not in (UserType.STARTUP, UserType.STAKEHOLDER):
            raise ValueError('User type must be one of: startup, stakeholder')
        return v


class UserUpdate(BaseModel):
    """Self-service edits; the role only changes through onboarding and reconciliation"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)

    @validator('first_name', 'last_name', pre=True)
    def not_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v


class UserResponse(BaseModel):
    id: str
    clerk_id: str
    email: str
    first_name: str
    last_name: str
    user_type: UserType
    profile_complete: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserMeResponse(UserResponse):
    was_updated: bool = False
