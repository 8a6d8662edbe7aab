from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from ..database.base import Base
from .user import utcnow, new_id


class AuditLog(Base):
    __tablename__ = "audit_logs"

    log_id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    activity = Column(String(100), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    details = Column(Text, nullable=True)
