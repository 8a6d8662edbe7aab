from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from ..database.base import Base
from .user import utcnow, new_id
import enum


class StartupStage(str, enum.Enum):
    IDEA = "Idea"
    PROTOTYPE = "Prototype"
    PRE_CLINICAL = "Pre-Clinical"
    FDA_SUBMISSION = "FDA Submission"
    POST_MARKET = "Post-Market"


class Startup(Base):
    __tablename__ = "startups"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, unique=True)
    company_name = Column(String(200), nullable=False)
    description = Column(Text)
    website = Column(String(500))
    stage = Column(String(50), nullable=False)
    focus_areas = Column(JSON, default=list)
    product_types = Column(JSON, default=list)
    technologies = Column(JSON, default=list)
    regulatory_status = Column(String(50))
    needs_clinical_trials = Column(Boolean, default=False)
    nih_funding_interest = Column(String(20))
    business_needs = Column(JSON, default=list)
    keywords = Column(JSON, default=list)
    current_goals = Column(JSON, default=list)
    current_needs = Column(JSON, default=list)
    milestones = Column(JSON, default=list)
    funding_status = Column(String(100))
    team_size = Column(Integer)
    location = Column(String(100))
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("startup_stage_idx", "stage"),
    )

    # Relationships
    user = relationship("User", back_populates="startup")
    connections = relationship("Connection", back_populates="startup")
