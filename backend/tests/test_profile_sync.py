import pytest

from app.models import User, UserType
from app.services.errors import UpstreamServiceError
from app.services.profile_sync import (
    MetadataStatus,
    ProfileStatus,
    mark_profile_complete,
    reconcile_profile_status,
    sync_user_profile_status,
)
from conftest import create_user, create_startup, create_stakeholder


# Pure decision

def test_stakeholder_profile_takes_priority():
    stored = ProfileStatus("startup", False)

    decision = reconcile_profile_status(MetadataStatus("startup", False), stored, True, True)

    assert decision.status == ProfileStatus("stakeholder", True)
    assert decision.needs_write is True


def test_startup_profile_marks_complete():
    stored = ProfileStatus("startup", False)

    decision = reconcile_profile_status(MetadataStatus(), stored, False, True)

    assert decision.status == ProfileStatus("startup", True)
    assert decision.needs_write is True


def test_profile_rows_override_metadata():
    """Metadata saying 'incomplete stakeholder' loses to an existing startup profile"""
    stored = ProfileStatus("startup", True)

    decision = reconcile_profile_status(MetadataStatus("stakeholder", False), stored, False, True)

    assert decision.status == stored
    assert decision.needs_write is False


def test_metadata_decides_without_profile_rows():
    stored = ProfileStatus("startup", False)

    decision = reconcile_profile_status(MetadataStatus("stakeholder", True), stored, False, False)

    assert decision.status == ProfileStatus("stakeholder", True)
    assert decision.needs_write is True


def test_absent_metadata_keeps_stored_values():
    stored = ProfileStatus("admin", False)

    decision = reconcile_profile_status(MetadataStatus(), stored, False, False)

    assert decision.status == stored
    assert decision.needs_write is False


def test_missing_user_row_returns_metadata_without_write():
    decision = reconcile_profile_status(MetadataStatus("stakeholder", True), None, False, False)

    assert decision.status == ProfileStatus("stakeholder", True)
    assert decision.needs_write is False


@pytest.mark.parametrize("metadata,stored,has_stakeholder,has_startup", [
    (MetadataStatus("startup", False), ProfileStatus("startup", False), True, True),
    (MetadataStatus("stakeholder", True), ProfileStatus("startup", False), False, False),
    (MetadataStatus(), ProfileStatus("startup", False), False, True),
    (MetadataStatus("startup", True), ProfileStatus("stakeholder", True), False, False),
])
def test_reconciliation_is_idempotent(metadata, stored, has_stakeholder, has_startup):
    first = reconcile_profile_status(metadata, stored, has_stakeholder, has_startup)
    second = reconcile_profile_status(metadata, first.status, has_stakeholder, has_startup)

    assert second.status == first.status
    assert second.needs_write is False


def test_metadata_parsing_ignores_unknown_user_type():
    status = MetadataStatus.from_metadata({"userType": "superuser", "onboardingComplete": True})

    assert status.user_type is None
    assert status.onboarding_complete is True
    assert MetadataStatus.from_metadata(None) == MetadataStatus()


# Read-repair against the database

def test_sync_repairs_incomplete_startup(db, auth_provider):
    """A startup profile marks the user complete; the second run changes nothing"""
    user = create_user(db, "user_repair", UserType.STARTUP, profile_complete=False)
    create_startup(db, user)

    first = sync_user_profile_status(db, user.clerk_id, auth_provider)

    assert first.was_updated is True
    assert first.profile_complete is True
    assert first.user_type == "startup"
    db.refresh(user)
    assert user.profile_complete is True

    second = sync_user_profile_status(db, user.clerk_id, auth_provider)

    assert second.was_updated is False
    assert second.to_dict() == {"profile_complete": True, "user_type": "startup", "was_updated": False}


def test_sync_switches_role_to_stakeholder(db, auth_provider):
    user = create_user(db, "user_switch", UserType.STARTUP, profile_complete=True)
    create_startup(db, user)
    create_stakeholder(db, user)

    result = sync_user_profile_status(db, user.clerk_id, auth_provider, {"userType": "startup"})

    assert result.user_type == "stakeholder"
    db.refresh(user)
    assert user.user_type == "stakeholder"


def test_sync_never_writes_to_auth_provider(db, auth_provider):
    user = create_user(db, "user_readonly", UserType.STARTUP)
    create_startup(db, user)

    sync_user_profile_status(db, user.clerk_id, auth_provider)

    auth_provider.get_user.assert_called_once_with(user.clerk_id)
    auth_provider.update_user_metadata.assert_not_called()


def test_sync_unknown_user_returns_metadata(db, auth_provider):
    result = sync_user_profile_status(
        db, "user_unknown", auth_provider, {"userType": "stakeholder", "onboardingComplete": False}
    )

    assert result.user_type == "stakeholder"
    assert result.profile_complete is False
    assert result.was_updated is False
    assert db.query(User).count() == 0


# Mark complete

def test_mark_profile_complete_updates_metadata_then_row(db, auth_provider):
    user = create_user(db, "user_done", UserType.STARTUP)

    mark_profile_complete(db, user, UserType.STAKEHOLDER, auth_provider)

    auth_provider.update_user_metadata.assert_called_once_with(
        "user_done", {"userType": "stakeholder", "onboardingComplete": True}
    )
    db.refresh(user)
    assert user.user_type == "stakeholder"
    assert user.profile_complete is True


def test_mark_profile_complete_leaves_row_when_provider_fails(db, auth_provider):
    user = create_user(db, "user_provider_down", UserType.STARTUP)
    auth_provider.update_user_metadata.side_effect = UpstreamServiceError("Auth provider error: 503")

    with pytest.raises(UpstreamServiceError):
        mark_profile_complete(db, user, UserType.STARTUP, auth_provider)

    db.refresh(user)
    assert user.profile_complete is False
