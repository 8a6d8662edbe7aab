"""
Profile-completion reconciliation between Clerk metadata and the users table.

Clerk caches ``userType`` / ``onboardingComplete`` in the user's public
metadata, independently of ``users.user_type`` / ``users.profile_complete``.
Profile rows are the ground truth: a stakeholder profile makes the user a
complete stakeholder, otherwise a startup profile makes them a complete
startup. Metadata only decides for users without any profile row.

Reconciliation repairs the local row only; it never writes to Clerk.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.models import Stakeholder, Startup, User, UserType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileStatus:
    user_type: str
    profile_complete: bool


@dataclass(frozen=True)
class MetadataStatus:
    """What Clerk metadata says; None where the key is absent or unusable"""
    user_type: Optional[str] = None
    onboarding_complete: Optional[bool] = None

    @classmethod
    def from_metadata(cls, metadata: Optional[Dict[str, Any]]) -> "MetadataStatus":
        metadata = metadata or {}
        user_type = metadata.get("userType")
        if user_type not in {t.value for t in UserType}:
            user_type = None
        complete = metadata.get("onboardingComplete")
        return cls(
            user_type=user_type,
            onboarding_complete=bool(complete) if complete is not None else None,
        )

    def as_status(self, fallback: Optional[ProfileStatus] = None) -> ProfileStatus:
        if fallback is None:
            fallback = ProfileStatus(UserType.STARTUP.value, False)
        return ProfileStatus(
            user_type=self.user_type or fallback.user_type,
            profile_complete=(
                self.onboarding_complete if self.onboarding_complete is not None
                else fallback.profile_complete
            ),
        )


@dataclass(frozen=True)
class ReconciliationDecision:
    status: ProfileStatus
    needs_write: bool


@dataclass
class ReconciliationResult:
    profile_complete: bool
    user_type: str
    was_updated: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile_complete": self.profile_complete,
            "user_type": self.user_type,
            "was_updated": self.was_updated,
        }


def reconcile_profile_status(
    metadata: MetadataStatus,
    stored: Optional[ProfileStatus],
    has_stakeholder_profile: bool,
    has_startup_profile: bool,
) -> ReconciliationDecision:
    """
    Decide the actual profile status and whether the stored row must change.

    Pure function: no I/O. ``stored`` is None when the user has no local row,
    in which case metadata is returned as-is and nothing is written.
    """
    if stored is None:
        return ReconciliationDecision(metadata.as_status(), needs_write=False)

    if has_stakeholder_profile:
        actual = ProfileStatus(UserType.STAKEHOLDER.value, True)
    elif has_startup_profile:
        actual = ProfileStatus(UserType.STARTUP.value, True)
    else:
        actual = metadata.as_status(fallback=stored)

    return ReconciliationDecision(actual, needs_write=actual != stored)


def sync_user_profile_status(
    db: Session,
    clerk_id: str,
    auth_provider,
    metadata: Optional[Dict[str, Any]] = None,
) -> ReconciliationResult:
    """
    Read-repair the local user row for ``clerk_id``.

    ``metadata`` may be passed when the caller already fetched the Clerk user;
    otherwise it is fetched through ``auth_provider``.
    """
    if metadata is None:
        metadata = auth_provider.get_user(clerk_id).public_metadata
    metadata_status = MetadataStatus.from_metadata(metadata)

    user = db.query(User).filter(User.clerk_id == clerk_id).first()
    if user is None:
        decision = reconcile_profile_status(metadata_status, None, False, False)
    else:
        has_stakeholder = db.query(Stakeholder.id).filter(Stakeholder.user_id == user.id).first() is not None
        has_startup = db.query(Startup.id).filter(Startup.user_id == user.id).first() is not None
        stored = ProfileStatus(user.user_type, bool(user.profile_complete))
        decision = reconcile_profile_status(metadata_status, stored, has_stakeholder, has_startup)

        if decision.needs_write:
            logger.info(
                f"Syncing profile status for user {clerk_id}: "
                f"profile_complete {user.profile_complete} -> {decision.status.profile_complete}, "
                f"user_type {user.user_type} -> {decision.status.user_type}"
            )
            try:
                user.user_type = decision.status.user_type
                user.profile_complete = decision.status.profile_complete
                db.commit()
            except Exception:
                db.rollback()
                raise

    return ReconciliationResult(
        profile_complete=decision.status.profile_complete,
        user_type=decision.status.user_type,
        was_updated=decision.needs_write,
    )


def mark_profile_complete(db: Session, user: User, user_type: UserType, auth_provider) -> None:
    """
    Record a finished onboarding in Clerk metadata, then in the local row.

    The two writes are sequential; if the second one fails the next
    reconciliation repairs the local row from the profile that now exists.
    """
    auth_provider.update_user_metadata(
        user.clerk_id,
        {"userType": user_type.value, "onboardingComplete": True},
    )

    try:
        user.user_type = user_type.value
        user.profile_complete = True
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Marked profile complete for user {user.clerk_id} as {user_type.value}")
