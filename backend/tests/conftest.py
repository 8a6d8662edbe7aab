import pytest
import sys
import os
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock

# Add the parent directory to sys.path to allow imports from app
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.database.base import Base, get_db
from app.auth.security import get_current_user
from app.models import User, UserType, Startup, Stakeholder, Connection, ConnectionStatus
from app.utils.clerk import ProviderUser, get_auth_provider
from app.utils.knock import get_knock_client
from app.utils.nih_reporter import get_nih_client

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    # Enable foreign key constraints
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Factories

def create_user(db, clerk_id, user_type=UserType.STARTUP, profile_complete=False,
                first_name="Test", last_name="User", email=None):
    user = User(
        clerk_id=clerk_id,
        email=email or f"{clerk_id}@example.com",
        first_name=first_name,
        last_name=last_name,
        user_type=user_type.value,
        profile_complete=profile_complete,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_startup(db, user, **overrides):
    values = {
        "company_name": "CardioSense",
        "description": "Wearable sensors for continuous cardiac monitoring",
        "stage": "Prototype",
        "focus_areas": ["Cardiology"],
        "product_types": ["Device"],
        "technologies": ["Sensors"],
        "keywords": [],
        "location": "Charleston, SC",
    }
    values.update(overrides)
    startup = Startup(user_id=user.id, **values)
    db.add(startup)
    db.commit()
    db.refresh(startup)
    return startup


def create_stakeholder(db, user, **overrides):
    values = {
        "stakeholder_type": "investor",
        "organization_name": "Lowcountry Ventures",
        "location": "Charleston, SC",
        "bio": "Early-stage medical device investor",
        "services_offered": ["Seed Funding"],
        "therapeutic_areas": ["Cardiology"],
        "industries": ["Medical Devices"],
    }
    values.update(overrides)
    stakeholder = Stakeholder(user_id=user.id, **values)
    db.add(stakeholder)
    db.commit()
    db.refresh(stakeholder)
    return stakeholder


def create_connection(db, startup, stakeholder, status=ConnectionStatus.PENDING, message="let's talk"):
    connection = Connection(
        startup_id=startup.id,
        stakeholder_id=stakeholder.id,
        status=status.value,
        initiated_by=startup.user_id,
        message=message,
    )
    db.add(connection)
    db.commit()
    db.refresh(connection)
    return connection


# Fixtures

@pytest.fixture(scope="function")
def db():
    # Create the database tables
    Base.metadata.create_all(bind=engine)

    # Create a new database session for each test
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    # Drop all tables after the test is complete
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def knock():
    """Stand-in for the notification service client"""
    knock = MagicMock()
    knock.is_configured = True
    knock.identify_user.return_value = True
    knock.trigger_workflow.return_value = {"workflow_run_id": "run_123"}
    return knock


@pytest.fixture
def auth_provider():
    """Stand-in for the auth provider backend client; metadata is empty by default"""
    provider = MagicMock()
    provider.get_user.side_effect = lambda user_id: ProviderUser(
        id=user_id,
        email=f"{user_id}@example.com",
        first_name="Provider",
        last_name="User",
        public_metadata={},
    )
    provider.update_user_metadata.side_effect = lambda user_id, metadata: ProviderUser(
        id=user_id, public_metadata=metadata
    )
    return provider


@pytest.fixture
def nih_client():
    client = MagicMock()
    client.search_projects_by_location.return_value = {"meta": {"total": 0}, "results": []}
    client.search_projects_by_focus_area.return_value = {"meta": {"total": 0}, "results": []}
    client.get_recent_projects.return_value = {"meta": {"total": 0}, "results": []}
    return client


@pytest.fixture(scope="function")
def client(db, knock, auth_provider, nih_client):
    # Import here to avoid circular imports
    from main import app

    # Override the get_db dependency to use our test database
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_knock_client] = lambda: knock
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_nih_client] = lambda: nih_client

    # Create test client
    with TestClient(app) as test_client:
        yield test_client

    # Reset dependency overrides after test
    app.dependency_overrides = {}


@pytest.fixture
def login():
    """Authenticate subsequent requests as the given external auth ID"""
    from main import app

    def _login(clerk_id):
        app.dependency_overrides[get_current_user] = lambda: {"sub": clerk_id}

    return _login


@pytest.fixture
def startup_user(db):
    return create_user(db, "user_startup_a", UserType.STARTUP, profile_complete=True,
                       first_name="Ada", last_name="Founder")


@pytest.fixture
def startup(db, startup_user):
    return create_startup(db, startup_user)


@pytest.fixture
def stakeholder_user(db):
    return create_user(db, "user_stakeholder_b", UserType.STAKEHOLDER, profile_complete=True,
                       first_name="Ben", last_name="Investor")


@pytest.fixture
def stakeholder(db, stakeholder_user):
    return create_stakeholder(db, stakeholder_user)
