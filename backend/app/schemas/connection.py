from pydantic import BaseModel, Field, validator
from typing import Optional, List, Any
from datetime import datetime
from pydantic import ConfigDict

from app.models.connection import ConnectionStatus


class ConnectionCreate(BaseModel):
    stakeholder_id: str = Field(..., min_length=1)
    message: Optional[str] = Field(None, max_length=2000)


class ConnectNotificationRequest(ConnectionCreate):
    startup_name: Optional[str] = Field(None, max_length=200)


class ConnectionRespond(BaseModel):
    status: ConnectionStatus
    response: Optional[str] = Field(None, max_length=2000)

    @validator('status')
    def validate_status(cls, v):
        if v == ConnectionStatus.PENDING:
            raise ValueError('Status must be one of: accepted, declined')
        return v


class ConnectionResponse(BaseModel):
    id: str
    startup_id: str
    stakeholder_id: str
    status: ConnectionStatus
    initiated_by: str
    message: Optional[str] = None
    response: Optional[str] = None
    ai_match_score: Optional[int] = None
    match_reasons: Optional[List[Any]] = None
    meeting_scheduled: Optional[bool] = None
    follow_up_completed: Optional[bool] = None
    connection_outcome: Optional[str] = None
    feedback: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ConnectionDetail(ConnectionResponse):
    """A connection with the counterparty's display fields"""
    # Seen by the startup
    stakeholder_name: Optional[str] = None
    stakeholder_organization: Optional[str] = None
    stakeholder_type: Optional[str] = None
    stakeholder_email: Optional[str] = None
    # Seen by the stakeholder
    startup_name: Optional[str] = None
    startup_stage: Optional[str] = None
    startup_focus_areas: Optional[List[str]] = None
    startup_description: Optional[str] = None
    founder_name: Optional[str] = None
    founder_email: Optional[str] = None


class ConnectionListResponse(BaseModel):
    connections: List[ConnectionDetail]


class ConnectionCreateResponse(BaseModel):
    message: str
    connection: ConnectionResponse


class ConnectNotificationResponse(ConnectionCreateResponse):
    notification_sent: bool = True
