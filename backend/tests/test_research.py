import pytest
import uuid

from app.models import UserType
from app.services.research_matching import find_research_matches, select_strategy, state_from_location
from app.utils.nih_reporter import NIHReporterError
from conftest import create_user, create_startup


@pytest.fixture
def profile(db):
    def _profile(**overrides):
        user = create_user(db, f"user_{uuid.uuid4().hex[:12]}", UserType.STARTUP)
        values = {"focus_areas": [], "keywords": [], "product_types": [], "location": None}
        values.update(overrides)
        return create_startup(db, user, **values)
    return _profile


# Strategy selection

def test_location_with_focus_comes_first(profile):
    startup = profile(focus_areas=["Cardiology"], keywords=["arrhythmia"], location="Charleston, SC")

    strategy = select_strategy(startup)

    assert strategy.name == "location_focus"
    assert strategy.states == ["SC"]
    assert strategy.focus_text == "Cardiology arrhythmia"


def test_full_state_name_counts_as_state(profile):
    startup = profile(focus_areas=["Oncology"], location="Austin, Texas")

    assert select_strategy(startup).states == ["Texas"]


def test_focus_and_keywords_without_usable_location(profile):
    startup = profile(focus_areas=["Cardiology"], keywords=["arrhythmia", "ECG"], location="Greater Boston Area")

    strategy = select_strategy(startup)

    assert strategy.name == "focus_keywords"
    assert strategy.focus_text == "Cardiology arrhythmia ECG"


def test_focus_only(profile):
    startup = profile(focus_areas=["Neurology", "Pediatrics"])

    strategy = select_strategy(startup)

    assert strategy.name == "focus"
    assert strategy.focus_text == "Neurology"


def test_recent_as_last_resort(profile):
    strategy = select_strategy(profile())

    assert strategy.name == "recent"
    assert strategy.limit == 10


def test_state_from_location():
    assert state_from_location("Charleston, SC") == "SC"
    assert state_from_location("Sacramento, California") == "California"
    assert state_from_location("Somewhere, Narnia") is None
    assert state_from_location("") is None


# Execution

def test_exactly_one_request_is_made(profile, nih_client):
    startup = profile(focus_areas=["Cardiology"], location="Charleston, SC")

    result = find_research_matches(nih_client, startup)

    assert result["strategy"] == "location_focus"
    nih_client.search_projects_by_location.assert_called_once_with(
        states=["SC"], focus_area="Cardiology", limit=15
    )
    nih_client.search_projects_by_focus_area.assert_not_called()
    nih_client.get_recent_projects.assert_not_called()


def test_failure_does_not_fall_back(profile, nih_client):
    startup = profile(focus_areas=["Cardiology"], location="Charleston, SC")
    nih_client.search_projects_by_location.side_effect = NIHReporterError("NIH RePORTER API error: 500", 500)

    with pytest.raises(NIHReporterError):
        find_research_matches(nih_client, startup)

    nih_client.search_projects_by_focus_area.assert_not_called()


# Endpoints

def test_matches_endpoint(client, login, nih_client, startup_user, startup):
    login(startup_user.clerk_id)

    response = client.get("/api/research/matches")

    assert response.status_code == 200
    assert response.json()["strategy"] == "location_focus"


def test_matches_endpoint_requires_startup(client, login, stakeholder_user):
    login(stakeholder_user.clerk_id)

    assert client.get("/api/research/matches").status_code == 403


def test_matches_endpoint_maps_nih_failure_to_502(client, login, nih_client, startup_user, startup):
    nih_client.search_projects_by_location.side_effect = NIHReporterError("NIH RePORTER API error: 500", 500)
    login(startup_user.clerk_id)

    response = client.get("/api/research/matches")

    assert response.status_code == 502
    assert response.json() == {"error": "External API error", "message": "NIH RePORTER API error: 500"}


def test_projects_search_by_focus(client, login, nih_client, startup_user):
    nih_client.search_projects_by_focus_area.return_value = {
        "meta": {"total": 1, "search_id": "s1"},
        "results": [{"core_project_num": "R01HL1", "project_title": "Cardiac sensor", "organization": {}}],
    }
    login(startup_user.clerk_id)

    response = client.get("/api/research/projects", params={"type": "focus", "query": "cardiology", "limit": 10})

    assert response.status_code == 200
    data = response.json()
    assert data["projects"][0]["id"] == "R01HL1"
    assert data["search_info"]["type"] == "focus"
    nih_client.search_projects_by_focus_area.assert_called_once_with("cardiology", 10)


@pytest.mark.parametrize("params", [
    {"type": "pi"},
    {"type": "award", "min_amount": 1000},
    {"type": "state"},
    {"type": "location", "focus_area": "cardiology"},
    {"type": "region"},
    {"type": "bogus", "query": "x"},
    {"type": "recent", "limit": 500},
])
def test_projects_search_parameter_errors(client, login, startup_user, params):
    login(startup_user.clerk_id)

    response = client.get("/api/research/projects", params=params)

    assert response.status_code == 400


def test_publications_endpoint(client, login, nih_client, startup_user):
    nih_client.get_project_publications.return_value = {
        "meta": {"total": 1},
        "results": [{"pmid": 123, "applid": 456}],
    }
    login(startup_user.clerk_id)

    response = client.get("/api/research/publications", params={"core_project_num": "R01HL1"})

    assert response.status_code == 200
    assert response.json() == {"publications": [{"pmid": 123, "applid": 456}], "total": 1,
                               "core_project_num": "R01HL1"}
