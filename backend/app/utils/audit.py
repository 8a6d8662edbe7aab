from sqlalchemy.orm import Session
from app.models.audit_log import AuditLog
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    activity: str,
    user_id: Optional[str] = None,
    details: Optional[str] = None
) -> Optional[AuditLog]:
    """
    Create an audit log entry for user activity.

    Args:
        db: Database session
        activity: Description of the activity (e.g., "connection_created", "message_sent")
        user_id: Internal ID of the user performing the action (None for system actions)
        details: Additional details about the activity

    Returns:
        The created AuditLog instance, or None if it could not be written
    """
    try:
        audit_log = AuditLog(
            user_id=str(user_id) if user_id is not None else None,
            activity=activity,
            details=details
        )

        db.add(audit_log)
        db.commit()
        db.refresh(audit_log)
        return audit_log
    except Exception as e:
        db.rollback()
        logger.error(f"Error logging activity {activity}: {str(e)}")
        # Auditing must not disrupt the main operation
        return None
