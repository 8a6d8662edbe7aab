from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from app.database.base import get_db
from app.models.user import User, UserType
from app.models.startup import Startup
from app.schemas.startup import (
    StartupOnboardingRequest, StartupOnboardingResponse, StartupUpdate,
    StartupResponse, StartupWithUser
)
from app.auth.security import get_current_db_user, check_role
from app.services.errors import NotFoundError
from app.services.onboarding_service import OnboardingService
from app.utils.clerk import get_auth_provider
from app.utils.knock import get_knock_client

router = APIRouter()

logger = logging.getLogger(__name__)


def _with_user(startup: Startup, user: User) -> StartupWithUser:
    response = StartupWithUser.model_validate(startup)
    response.first_name = user.first_name
    response.last_name = user.last_name
    response.email = user.email
    return response


@router.post("/onboarding", response_model=StartupOnboardingResponse, status_code=status.HTTP_201_CREATED)
def submit_onboarding(
        form: StartupOnboardingRequest,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db),
        auth_provider=Depends(get_auth_provider),
        knock=Depends(get_knock_client)
):
    """
    Save the startup onboarding form and mark the caller's profile complete.

    Current goals and needs are derived from the form when not supplied.
    """
    service = OnboardingService(db, auth_provider, knock)
    startup = service.submit_startup_onboarding(user, form)
    return {
        "message": "Startup onboarding completed successfully",
        "startup": startup,
        "redirect_to": "/dashboard",
    }


@router.get("/me", response_model=StartupWithUser)
def get_my_startup(
        user: User = Depends(check_role(UserType.STARTUP)),
        db: Session = Depends(get_db)
):
    startup = db.query(Startup).filter(Startup.user_id == user.id).first()
    if not startup:
        raise NotFoundError("Startup profile not found")
    return _with_user(startup, user)


@router.patch("/me", response_model=StartupResponse)
def update_my_startup(
        update: StartupUpdate,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db),
        auth_provider=Depends(get_auth_provider)
):
    return OnboardingService(db, auth_provider).update_startup(user, update)


@router.get("/{startup_id}", response_model=StartupWithUser)
def get_startup(
        startup_id: str,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db)
):
    row = db.query(Startup, User).join(User, Startup.user_id == User.id).filter(
        Startup.id == startup_id
    ).first()
    if not row:
        raise NotFoundError("Startup not found")
    return _with_user(*row)
