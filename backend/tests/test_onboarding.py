import pytest

from app.models import Startup, Stakeholder, User, UserType
from app.schemas.startup import StartupOnboardingRequest
from app.services.onboarding_service import derive_current_goals, derive_current_needs
from conftest import create_user


def startup_form(**overrides):
    form = {
        "company_name": "CardioSense",
        "description": "Wearable sensors for continuous cardiac monitoring at home",
        "stage": "Prototype",
        "focus_areas": ["Cardiology"],
        "product_types": ["Device", "Software"],
        "technologies": ["Sensors", "AI/ML"],
        "regulatory_status": "Pre-IDE",
        "needs_clinical_trials": True,
        "nih_funding_interest": "Interested",
        "business_needs": ["IP & Licensing"],
        "keywords": ["arrhythmia"],
        "location": "Charleston, SC",
        "team_size": 4,
    }
    form.update(overrides)
    return form


def stakeholder_form(**overrides):
    form = {
        "first_name": "Ben",
        "last_name": "Investor",
        "stakeholder_type": "investor",
        "organization_name": "Lowcountry Ventures",
        "contact_email": "ben@lowcountry.example.com",
        "bio": "Seed investor in medical devices",
        "services_offered": ["Seed Funding"],
        "therapeutic_areas": ["Cardiology"],
    }
    form.update(overrides)
    return form


# Derived goals and needs

def test_derive_goals_and_needs():
    form = StartupOnboardingRequest(**startup_form())

    assert derive_current_goals(form) == [
        "Build medical devices",
        "Develop healthcare software",
        "Conduct clinical trials",
        "Navigate regulatory approval process",
    ]
    assert derive_current_needs(form) == [
        "Intellectual property support",
        "AI/ML expertise",
        "Clinical trial design and execution",
        "NIH funding guidance",
    ]


def test_derive_defaults():
    form = StartupOnboardingRequest(**startup_form(
        product_types=["Other"],
        technologies=["Robotics"],
        regulatory_status="None",
        needs_clinical_trials=False,
        nih_funding_interest="No",
        business_needs=[],
    ))

    assert derive_current_goals(form) == ["Advance product development"]
    assert derive_current_needs(form) == ["General business support"]


# Startup onboarding

def test_startup_onboarding(client, db, login, auth_provider, knock):
    user = create_user(db, "user_onboard", UserType.STARTUP)
    login(user.clerk_id)

    response = client.post("/api/startups/onboarding", json=startup_form())

    assert response.status_code == 201
    data = response.json()
    assert data["startup"]["company_name"] == "CardioSense"
    assert "Conduct clinical trials" in data["startup"]["current_goals"]

    db.refresh(user)
    assert user.profile_complete is True
    auth_provider.update_user_metadata.assert_called_once_with(
        "user_onboard", {"userType": "startup", "onboardingComplete": True}
    )
    knock.identify_user.assert_called_once()
    assert knock.identify_user.call_args.kwargs["company"] == "CardioSense"


def test_startup_onboarding_twice_updates_profile(client, db, login):
    user = create_user(db, "user_resubmit", UserType.STARTUP)
    login(user.clerk_id)
    client.post("/api/startups/onboarding", json=startup_form())

    response = client.post("/api/startups/onboarding", json=startup_form(company_name="CardioSense Health"))

    assert response.status_code == 201
    assert db.query(Startup).count() == 1
    assert db.query(Startup).one().company_name == "CardioSense Health"


def test_startup_onboarding_keeps_supplied_goals(client, db, login):
    user = create_user(db, "user_goals", UserType.STARTUP)
    login(user.clerk_id)

    response = client.post("/api/startups/onboarding", json=startup_form(current_goals=["Raise a seed round"]))

    assert response.json()["startup"]["current_goals"] == ["Raise a seed round"]


def test_startup_onboarding_survives_identify_failure(client, db, login, knock):
    knock.identify_user.side_effect = RuntimeError("connection reset")
    user = create_user(db, "user_knock_down", UserType.STARTUP)
    login(user.clerk_id)

    response = client.post("/api/startups/onboarding", json=startup_form())

    assert response.status_code == 201


def test_startup_onboarding_provider_failure(client, db, login, auth_provider):
    """The profile is saved even if the auth provider rejects the metadata update"""
    from app.services.errors import UpstreamServiceError
    auth_provider.update_user_metadata.side_effect = UpstreamServiceError("Auth provider error: 500")
    user = create_user(db, "user_provider_error", UserType.STARTUP)
    login(user.clerk_id)

    response = client.post("/api/startups/onboarding", json=startup_form())

    assert response.status_code == 502
    assert db.query(Startup).count() == 1
    db.refresh(user)
    assert user.profile_complete is False


@pytest.mark.parametrize("overrides", [
    {"description": "Too short"},
    {"stage": "Series A"},
    {"focus_areas": []},
    {"team_size": 0},
    {"nih_funding_interest": "Maybe"},
    {"regulatory_status": "Approved"},
])
def test_startup_onboarding_validation(client, db, login, overrides):
    user = create_user(db, "user_invalid_form", UserType.STARTUP)
    login(user.clerk_id)

    response = client.post("/api/startups/onboarding", json=startup_form(**overrides))

    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"
    assert db.query(Startup).count() == 0


def test_startup_onboarding_rejects_stakeholder(client, login, stakeholder_user):
    login(stakeholder_user.clerk_id)

    response = client.post("/api/startups/onboarding", json=startup_form())

    assert response.status_code == 403


# Stakeholder onboarding

def test_stakeholder_onboarding(client, db, login, auth_provider):
    user = create_user(db, "user_new_stakeholder", UserType.STARTUP)
    login(user.clerk_id)

    response = client.post("/api/stakeholders/onboarding", json=stakeholder_form())

    assert response.status_code == 200
    assert response.json()["user_id"] == user.id
    db.refresh(user)
    assert user.user_type == "stakeholder"
    assert user.profile_complete is True
    assert user.first_name == "Ben"
    stakeholder = db.query(Stakeholder).one()
    assert stakeholder.therapeutic_areas == ["Cardiology"]
    auth_provider.update_user_metadata.assert_called_once_with(
        "user_new_stakeholder", {"userType": "stakeholder", "onboardingComplete": True}
    )


def test_stakeholder_onboarding_creates_user_on_first_sight(client, db, login):
    login("user_never_seen")

    response = client.post("/api/stakeholders/onboarding", json=stakeholder_form())

    assert response.status_code == 200
    user = db.query(User).filter(User.clerk_id == "user_never_seen").one()
    assert user.user_type == "stakeholder"


@pytest.mark.parametrize("overrides", [
    {"stakeholder_type": "banker"},
    {"bio": "x" * 501},
    {"capabilities": "x" * 1001},
    {"contact_email": "nope"},
    {"website": "lowcountry.vc"},
])
def test_stakeholder_onboarding_validation(client, db, login, overrides):
    user = create_user(db, "user_invalid_stakeholder", UserType.STARTUP)
    login(user.clerk_id)

    response = client.post("/api/stakeholders/onboarding", json=stakeholder_form(**overrides))

    assert response.status_code == 400
    assert db.query(Stakeholder).count() == 0


# Profile reads and edits

def test_get_my_startup(client, login, startup_user, startup):
    login(startup_user.clerk_id)

    response = client.get("/api/startups/me")

    assert response.status_code == 200
    assert response.json()["id"] == startup.id
    assert response.json()["first_name"] == "Ada"


def test_get_my_startup_missing_profile(client, db, login):
    user = create_user(db, "user_no_startup", UserType.STARTUP)
    login(user.clerk_id)

    response = client.get("/api/startups/me")

    assert response.status_code == 404


def test_get_startup_by_id(client, login, stakeholder_user, startup):
    login(stakeholder_user.clerk_id)

    response = client.get(f"/api/startups/{startup.id}")

    assert response.status_code == 200
    assert response.json()["company_name"] == "CardioSense"
    assert client.get("/api/startups/unknown").status_code == 404


def test_update_my_startup(client, login, startup_user, startup):
    login(startup_user.clerk_id)

    response = client.patch("/api/startups/me", json={"team_size": 12, "stage": "Pre-Clinical"})

    assert response.status_code == 200
    assert response.json()["team_size"] == 12
    assert response.json()["stage"] == "Pre-Clinical"
    assert response.json()["company_name"] == "CardioSense"


def test_get_and_update_my_stakeholder(client, login, stakeholder_user, stakeholder):
    login(stakeholder_user.clerk_id)

    assert client.get("/api/stakeholders/me").json()["organization_name"] == "Lowcountry Ventures"

    response = client.patch("/api/stakeholders/me", json={"industries": ["Diagnostics"]})

    assert response.status_code == 200
    assert response.json()["industries"] == ["Diagnostics"]


def test_get_stakeholder_by_id(client, login, startup_user, stakeholder):
    login(startup_user.clerk_id)

    response = client.get(f"/api/stakeholders/{stakeholder.id}")

    assert response.status_code == 200
    assert response.json()["last_name"] == "Investor"


@pytest.mark.parametrize("field", ["company_name", "stage"])
def test_update_my_startup_rejects_null_required_fields(client, db, login, startup_user, startup, field):
    login(startup_user.clerk_id)

    response = client.patch("/api/startups/me", json={field: None})

    assert response.status_code == 400
    assert any(detail["loc"][-1] == field for detail in response.json()["details"])
    db.refresh(startup)
    assert startup.company_name == "CardioSense"
    assert startup.stage == "Prototype"


def test_update_my_stakeholder_rejects_null_type(client, db, login, stakeholder_user, stakeholder):
    login(stakeholder_user.clerk_id)

    response = client.patch("/api/stakeholders/me", json={"stakeholder_type": None})

    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"
    db.refresh(stakeholder)
    assert stakeholder.stakeholder_type == "investor"


def test_update_my_startup_allows_clearing_optional_fields(client, login, startup_user, startup):
    login(startup_user.clerk_id)

    response = client.patch("/api/startups/me", json={"location": None})

    assert response.status_code == 200
    assert response.json()["location"] is None
