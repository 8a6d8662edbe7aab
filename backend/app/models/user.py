from sqlalchemy import Column, String, Boolean, DateTime, Index
from sqlalchemy.orm import relationship
from ..database.base import Base
from datetime import datetime, timezone
import uuid
import enum


def utcnow():
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class UserType(str, enum.Enum):
    STARTUP = "startup"
    STAKEHOLDER = "stakeholder"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    clerk_id = Column(String(255), nullable=False, unique=True)  # external auth ID
    email = Column(String(255), nullable=False, default="")
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    user_type = Column(String(20), nullable=False, default=UserType.STARTUP.value)
    profile_complete = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("user_type_idx", "user_type"),
    )

    # Relationships
    startup = relationship("Startup", back_populates="user", uselist=False)
    stakeholder = relationship("Stakeholder", back_populates="user", uselist=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
