from sqlalchemy import (
    Column, String, Text, Integer, Boolean, DateTime, ForeignKey, JSON, Index,
    UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship
from ..database.base import Base
from .user import utcnow, new_id
import enum


class ConnectionStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

    @property
    def is_terminal(self) -> bool:
        return self is not ConnectionStatus.PENDING


class Connection(Base):
    __tablename__ = "connections"

    id = Column(String(36), primary_key=True, default=new_id)
    startup_id = Column(String(36), ForeignKey("startups.id"), nullable=False)
    stakeholder_id = Column(String(36), ForeignKey("stakeholders.id"), nullable=False)
    status = Column(String(20), nullable=False, default=ConnectionStatus.PENDING.value)
    initiated_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    message = Column(Text)
    response = Column(Text)
    ai_match_score = Column(Integer)  # 0-100
    match_reasons = Column(JSON)
    meeting_scheduled = Column(Boolean, default=False)
    follow_up_completed = Column(Boolean, default=False)
    connection_outcome = Column(String(100))
    feedback = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("startup_id", "stakeholder_id", name="uq_connection_pair"),
        CheckConstraint(
            status.in_([s.value for s in ConnectionStatus]),
            name="valid_connection_status"
        ),
        Index("connection_status_idx", "status"),
        Index("connection_stakeholder_idx", "stakeholder_id"),
    )

    # Relationships
    startup = relationship("Startup", back_populates="connections")
    stakeholder = relationship("Stakeholder", back_populates="connections")
