from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.base import get_db
from app.models.user import User
from app.schemas.dashboard import DashboardStatsResponse
from app.auth.security import get_current_db_user
from app.services.dashboard_service import get_dashboard_stats

router = APIRouter()


@router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db)
):
    return {"stats": get_dashboard_stats(db, user)}
