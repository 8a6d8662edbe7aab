from pydantic import BaseModel, Field, validator

from app.models.user import UserType


class MessageSendRequest(BaseModel):
    connection_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=2000)
    recipient_type: UserType

    @validator('message')
    def message_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Message cannot be blank')
        return v.strip()

    @validator('recipient_type')
    def validate_recipient_type(cls, v):
        if v not in (UserType.STARTUP, UserType.STAKEHOLDER):
            raise ValueError('Recipient type must be one of: startup, stakeholder')
        return v


class MessageSendResponse(BaseModel):
    success: bool = True
    message: str = "Message sent successfully"
