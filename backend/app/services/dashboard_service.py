import logging
from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import Connection, ConnectionStatus, Stakeholder, Startup, User, UserType
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)


def profile_completeness(startup: Startup) -> int:
    """Percentage of the eleven optional profile fields that are filled"""
    fields = [
        startup.description,
        startup.website,
        startup.stage,
        startup.focus_areas,
        startup.product_types,
        startup.technologies,
        startup.current_goals,
        startup.current_needs,
        startup.funding_status,
        startup.team_size,
        startup.location,
    ]
    filled = len([value for value in fields if value])
    return round(filled / len(fields) * 100)


def _connection_counts(db: Session, column, profile_id: str) -> Dict[str, int]:
    rows = db.query(Connection.status, func.count(Connection.id)).filter(
        column == profile_id
    ).group_by(Connection.status).all()
    by_status = {status: count for status, count in rows}
    return {
        "total_connections": sum(by_status.values()),
        "active_connections": by_status.get(ConnectionStatus.ACCEPTED.value, 0),
        "pending_requests": by_status.get(ConnectionStatus.PENDING.value, 0),
    }


def get_dashboard_stats(db: Session, user: User) -> Dict[str, Any]:
    if user.user_type == UserType.STARTUP.value:
        startup = db.query(Startup).filter(Startup.user_id == user.id).first()
        if not startup:
            raise NotFoundError("Startup profile not found")

        stats = {"user_type": UserType.STARTUP.value}
        stats.update(_connection_counts(db, Connection.startup_id, startup.id))
        stats.update({
            "completeness_score": profile_completeness(startup),
            "company_name": startup.company_name,
            "stage": startup.stage,
            "team_size": startup.team_size,
            "location": startup.location,
            "funding_status": startup.funding_status,
            "focus_areas": startup.focus_areas or [],
            "current_goals": startup.current_goals or [],
            "current_needs": startup.current_needs or [],
        })
        return stats

    if user.user_type == UserType.STAKEHOLDER.value:
        stakeholder = db.query(Stakeholder).filter(Stakeholder.user_id == user.id).first()
        if not stakeholder:
            raise NotFoundError("Stakeholder profile not found")

        stats = {"user_type": UserType.STAKEHOLDER.value}
        stats.update(_connection_counts(db, Connection.stakeholder_id, stakeholder.id))
        stats.update({
            "stakeholder_type": stakeholder.stakeholder_type,
            "organization_name": stakeholder.organization_name,
            "location": stakeholder.location,
            "services_offered": stakeholder.services_offered or [],
            "therapeutic_areas": stakeholder.therapeutic_areas or [],
            "industries": stakeholder.industries or [],
        })
        return stats

    # Admin: platform totals
    return {
        "user_type": UserType.ADMIN.value,
        "total_users": db.query(func.count(User.id)).scalar(),
        "total_startups": db.query(func.count(Startup.id)).scalar(),
        "total_stakeholders": db.query(func.count(Stakeholder.id)).scalar(),
        "total_connections": db.query(func.count(Connection.id)).scalar(),
    }
