"""
Startup and stakeholder onboarding, and profile edits.

Onboarding upserts the role's profile row, then marks the user complete
(auth-provider metadata first, local row second) and finally registers the
user with the notification service on a best-effort basis.
"""
import logging
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Stakeholder, Startup, User, UserType
from app.schemas.stakeholder import StakeholderOnboardingRequest, StakeholderUpdate
from app.schemas.startup import StartupOnboardingRequest, StartupUpdate
from app.services.errors import NotFoundError, PermissionDeniedError
from app.services.profile_sync import mark_profile_complete
from app.utils.audit import log_activity
from app.utils.constants import (
    BUSINESS_NEED_DESCRIPTIONS,
    DEFAULT_GOAL,
    DEFAULT_NEED,
    PRODUCT_TYPE_GOALS,
)

logger = logging.getLogger(__name__)


def derive_current_goals(form: StartupOnboardingRequest) -> List[str]:
    goals = [goal for product_type, goal in PRODUCT_TYPE_GOALS.items() if product_type in form.product_types]
    if form.needs_clinical_trials:
        goals.append("Conduct clinical trials")
    if form.regulatory_status and form.regulatory_status != "None":
        goals.append("Navigate regulatory approval process")
    return goals or [DEFAULT_GOAL]


def derive_current_needs(form: StartupOnboardingRequest) -> List[str]:
    needs = [BUSINESS_NEED_DESCRIPTIONS[need] for need in form.business_needs if need in BUSINESS_NEED_DESCRIPTIONS]
    if "AI/ML" in form.technologies:
        needs.append("AI/ML expertise")
    if form.needs_clinical_trials:
        needs.append("Clinical trial design and execution")
    if form.nih_funding_interest in ("Yes", "Interested"):
        needs.append("NIH funding guidance")
    return needs or [DEFAULT_NEED]


class OnboardingService:

    def __init__(self, db: Session, auth_provider, notifier=None):
        self.db = db
        self.auth_provider = auth_provider
        self.notifier = notifier

    def _upsert_profile(self, model: Type, user_id: str, values: Dict[str, Any]):
        """
        Insert or update the profile row keyed by ``user_id``. The unique
        constraint on ``user_id`` turns a concurrent insert into an update.
        """
        profile = self.db.query(model).filter(model.user_id == user_id).first()
        if profile is None:
            profile = model(user_id=user_id, **values)
            self.db.add(profile)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                profile = self.db.query(model).filter(model.user_id == user_id).one()
                for key, value in values.items():
                    setattr(profile, key, value)
                self.db.commit()
        else:
            for key, value in values.items():
                setattr(profile, key, value)
            self.db.commit()

        self.db.refresh(profile)
        return profile

    def _identify(self, user: User, organization: Optional[str] = None, company: Optional[str] = None) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.identify_user(
                user.clerk_id,
                name=user.full_name,
                email=user.email,
                organization=organization,
                company=company,
                user_type=user.user_type,
            )
        except Exception as e:
            logger.error(f"Failed to identify user {user.clerk_id} with notification service: {str(e)}")

    def submit_startup_onboarding(self, user: User, form: StartupOnboardingRequest) -> Startup:
        if user.user_type != UserType.STARTUP.value:
            raise PermissionDeniedError("Access denied - not a startup user")

        if form.first_name:
            user.first_name = form.first_name
        if form.last_name:
            user.last_name = form.last_name

        values = {
            "company_name": form.company_name,
            "description": form.description,
            "website": form.website or None,
            "stage": form.stage.value,
            "focus_areas": form.focus_areas,
            "product_types": form.product_types,
            "technologies": form.technologies,
            "regulatory_status": form.regulatory_status,
            "needs_clinical_trials": form.needs_clinical_trials,
            "nih_funding_interest": form.nih_funding_interest,
            "business_needs": form.business_needs,
            "keywords": form.keywords,
            "current_goals": form.current_goals or derive_current_goals(form),
            "current_needs": form.current_needs or derive_current_needs(form),
            "milestones": form.milestones or [],
            "funding_status": form.funding_status,
            "team_size": form.team_size,
            "location": form.location,
        }

        try:
            startup = self._upsert_profile(Startup, user.id, values)
        except Exception:
            self.db.rollback()
            raise

        mark_profile_complete(self.db, user, UserType.STARTUP, self.auth_provider)
        self._identify(user, company=startup.company_name)

        logger.info(f"Startup onboarding completed for user {user.id}: {startup.company_name}")
        log_activity(self.db, "startup_onboarded", user.id, f"Startup profile {startup.id} saved")
        return startup

    def submit_stakeholder_onboarding(self, user: User, form: StakeholderOnboardingRequest) -> Stakeholder:
        user.first_name = form.first_name
        user.last_name = form.last_name
        user.user_type = UserType.STAKEHOLDER.value

        values = {
            "stakeholder_type": form.stakeholder_type.value,
            "organization_name": form.organization_name,
            "contact_email": form.contact_email,
            "website": form.website,
            "location": form.location,
            "bio": form.bio,
            "services_offered": form.services_offered,
            "therapeutic_areas": form.therapeutic_areas,
            "industries": form.industries,
            "capabilities": form.capabilities,
        }

        try:
            stakeholder = self._upsert_profile(Stakeholder, user.id, values)
        except Exception:
            self.db.rollback()
            raise

        mark_profile_complete(self.db, user, UserType.STAKEHOLDER, self.auth_provider)
        self._identify(user, organization=stakeholder.organization_name)

        logger.info(f"Stakeholder onboarding completed for user {user.id}")
        log_activity(self.db, "stakeholder_onboarded", user.id, f"Stakeholder profile {stakeholder.id} saved")
        return stakeholder

    # Profile edits

    def update_startup(self, user: User, update: StartupUpdate) -> Startup:
        if user.user_type != UserType.STARTUP.value:
            raise PermissionDeniedError("Access denied - not a startup user")
        startup = self.db.query(Startup).filter(Startup.user_id == user.id).first()
        if not startup:
            raise NotFoundError("Startup profile not found")

        update_data = update.model_dump(exclude_unset=True)
        if update_data.get("stage") is not None:
            update_data["stage"] = update_data["stage"].value
        return self._apply_update(startup, update_data, user, "startup_updated")

    def update_stakeholder(self, user: User, update: StakeholderUpdate) -> Stakeholder:
        if user.user_type != UserType.STAKEHOLDER.value:
            raise PermissionDeniedError("Access denied - not a stakeholder user")
        stakeholder = self.db.query(Stakeholder).filter(Stakeholder.user_id == user.id).first()
        if not stakeholder:
            raise NotFoundError("Stakeholder profile not found")

        update_data = update.model_dump(exclude_unset=True)
        if update_data.get("stakeholder_type") is not None:
            update_data["stakeholder_type"] = update_data["stakeholder_type"].value
        return self._apply_update(stakeholder, update_data, user, "stakeholder_updated")

    def _apply_update(self, profile, update_data: Dict[str, Any], user: User, activity: str):
        try:
            for key, value in update_data.items():
                setattr(profile, key, value)
            self.db.commit()
            self.db.refresh(profile)
        except Exception:
            self.db.rollback()
            raise

        log_activity(self.db, activity, user.id, f"Updated fields: {', '.join(sorted(update_data)) or 'none'}")
        return profile
