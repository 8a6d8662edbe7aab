from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Dict, Any
import logging

from app.database.base import get_db
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate, UserResponse, UserMeResponse
from app.auth.security import get_current_user, get_current_db_user
from app.services.errors import ConflictError
from app.services.profile_sync import sync_user_profile_status
from app.utils.audit import log_activity
from app.utils.clerk import get_auth_provider

router = APIRouter()

logger = logging.getLogger(__name__)


@router.get("/me", response_model=UserMeResponse)
def get_me(
        current_user: Dict[str, Any] = Depends(get_current_user),
        db: Session = Depends(get_db),
        auth_provider=Depends(get_auth_provider)
):
    """
    Return the caller's user record after reconciling it with the auth
    provider's metadata. ``was_updated`` reports whether the stored role or
    profile-complete flag had to be repaired.
    """
    clerk_id = current_user["sub"]
    provider_user = auth_provider.get_user(clerk_id)
    result = sync_user_profile_status(db, clerk_id, auth_provider, provider_user.public_metadata)

    user = db.query(User).filter(User.clerk_id == clerk_id).first()
    if user is None:
        # First sight of this user: seed the row from the provider
        user = User(
            clerk_id=clerk_id,
            email=provider_user.email,
            first_name=provider_user.first_name,
            last_name=provider_user.last_name,
            user_type=result.user_type,
            profile_complete=result.profile_complete,
        )
        db.add(user)
        try:
            db.commit()
            db.refresh(user)
            logger.info(f"Created user {user.id} for {clerk_id} from auth provider profile")
        except IntegrityError:
            db.rollback()
            user = db.query(User).filter(User.clerk_id == clerk_id).one()
    else:
        db.refresh(user)

    response = UserMeResponse.model_validate(user)
    response.was_updated = result.was_updated
    return response


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
        user_data: UserCreate,
        current_user: Dict[str, Any] = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    clerk_id = current_user["sub"]
    if db.query(User).filter(User.clerk_id == clerk_id).first():
        raise ConflictError("User already exists")

    user = User(
        clerk_id=clerk_id,
        email=user_data.email,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        user_type=user_data.user_type.value,
        profile_complete=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists")
    db.refresh(user)

    log_activity(db, "user_created", user.id, f"User created with role {user.user_type}")
    return user


@router.patch("/me", response_model=UserResponse)
def update_me(
        user_update: UserUpdate,
        user: User = Depends(get_current_db_user),
        db: Session = Depends(get_db)
):
    update_data = user_update.model_dump(exclude_unset=True)
    try:
        for key, value in update_data.items():
            setattr(user, key, value)
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    log_activity(db, "user_updated", user.id, f"Updated fields: {', '.join(sorted(update_data)) or 'none'}")
    return user
