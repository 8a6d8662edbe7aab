import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa

from app.auth.security import decode_session_token


@pytest.fixture(scope="module")
def signing_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def make_token(private_key, **claims):
    payload = {"sub": "user_startup_a", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
    payload.update(claims)
    return jwt.encode(payload, private_key, algorithm="RS256")


@pytest.fixture
def jwks(signing_key):
    jwks_client = MagicMock()
    jwks_client.get_signing_key_from_jwt.return_value = MagicMock(key=signing_key.public_key())
    with patch("app.auth.security.get_jwks_client", return_value=jwks_client):
        yield jwks_client


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "MedTech Connect API"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "reachable"}


def test_docs_require_credentials(client):
    assert client.get("/docs").status_code == 401
    assert client.get("/openapi.json", auth=("admin", "wrong")).status_code == 401


def test_docs_with_credentials(client):
    with patch("config.DOCS_USERNAME", "admin"), patch("config.DOCS_PASSWORD", "s3cret"):
        response = client.get("/openapi.json", auth=("admin", "s3cret"))

    assert response.status_code == 200
    assert "/api/connections" in response.json()["paths"]


def test_missing_bearer_token(client):
    response = client.get("/api/dashboard/stats")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_valid_session_token(client, jwks, signing_key, startup_user, startup):
    token = make_token(signing_key)

    response = client.get("/api/dashboard/stats", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["stats"]["company_name"] == "CardioSense"


def test_expired_session_token(client, jwks, signing_key):
    token = make_token(signing_key, exp=datetime.now(timezone.utc) - timedelta(minutes=1))

    response = client.get("/api/dashboard/stats", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_signed_by_another_key(client, jwks):
    other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    token = make_token(other_key)

    response = client.get("/api/dashboard/stats", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_decode_checks_issuer_when_configured(jwks, signing_key):
    token = make_token(signing_key, iss="https://other.example.com")

    with patch("config.CLERK_ISSUER", "https://clerk.example.com"):
        with pytest.raises(jwt.InvalidIssuerError):
            decode_session_token(token)
