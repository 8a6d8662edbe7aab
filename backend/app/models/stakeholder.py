from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from ..database.base import Base
from .user import utcnow, new_id
import enum


class StakeholderType(str, enum.Enum):
    CRO = "cro"
    FINANCIER = "financier"
    CONSULTANT = "consultant"
    ADVISOR = "advisor"
    INVESTOR = "investor"
    SERVICE_PROVIDER = "service_provider"
    MUSC_FACULTY = "musc_faculty"
    OTHER = "other"


class Stakeholder(Base):
    __tablename__ = "stakeholders"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, unique=True)
    stakeholder_type = Column(String(50), nullable=False)
    organization_name = Column(String(200))
    contact_email = Column(String(255))
    website = Column(String(500))
    location = Column(String(100))
    bio = Column(Text)
    services_offered = Column(JSON, default=list)
    therapeutic_areas = Column(JSON, default=list)
    industries = Column(JSON, default=list)
    capabilities = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("stakeholder_type_idx", "stakeholder_type"),
    )

    # Relationships
    user = relationship("User", back_populates="stakeholder")
    connections = relationship("Connection", back_populates="stakeholder")
