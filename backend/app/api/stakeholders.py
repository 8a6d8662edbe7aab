from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.database.base import get_db
from app.models.user import User, UserType
from app.models.stakeholder import Stakeholder
from app.schemas.stakeholder import (
    StakeholderOnboardingRequest, StakeholderOnboardingResponse, StakeholderUpdate,
    StakeholderResponse, StakeholderWithUser
)
from app.auth.security import get_current_db_user, check_role
from app.services.errors import NotFoundError
from app.services.onboarding_service import OnboardingService
from app.utils.clerk import get_auth_provider
from app.utils.knock import get_knock_client

router = APIRouter()

logger = logging.getLogger(__name__)


def _with_user(stakeholder: Stakeholder, user: User) -> StakeholderWithUser:
    response = StakeholderWithUser.model_validate(stakeholder)
    response.first_name = user.first_name
    response.last_name = user.last_name
    response.email = user.email
    return response


@router.post("/onboarding", response_model=StakeholderOnboardingResponse)
def submit_onboarding(
        form: StakeholderOnboardingRequest,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db),
        auth_provider=Depends(get_auth_provider),
        knock=Depends(get_knock_client)
):
    """Any signed-in user may onboard as a stakeholder; their role becomes ``stakeholder``"""
    service = OnboardingService(db, auth_provider, knock)
    stakeholder = service.submit_stakeholder_onboarding(user, form)
    return {
        "message": "Stakeholder profile saved successfully!",
        "user_id": user.id,
        "stakeholder": stakeholder,
    }


@router.get("/me", response_model=StakeholderWithUser)
def get_my_stakeholder(
        user: User = Depends(check_role(UserType.STAKEHOLDER)),
        db: Session = Depends(get_db)
):
    stakeholder = db.query(Stakeholder).filter(Stakeholder.user_id == user.id).first()
    if not stakeholder:
        raise NotFoundError("Stakeholder profile not found")
    return _with_user(stakeholder, user)


@router.patch("/me", response_model=StakeholderResponse)
def update_my_stakeholder(
        update: StakeholderUpdate,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db),
        auth_provider=Depends(get_auth_provider)
):
    return OnboardingService(db, auth_provider).update_stakeholder(user, update)


@router.get("/{stakeholder_id}", response_model=StakeholderWithUser)
def get_stakeholder(
        stakeholder_id: str,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db)
):
    row = db.query(Stakeholder, User).join(User, Stakeholder.user_id == User.id).filter(
        Stakeholder.id == stakeholder_id
    ).first()
    if not row:
        raise NotFoundError("Stakeholder not found")
    return _with_user(*row)
