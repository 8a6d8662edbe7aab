"""
Caller identification.

Session tokens are issued by Clerk and verified here against Clerk's JWKS.
The verified claims are resolved to the local User row, which is created on
first sight.
"""
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import config
from app.database.base import get_db
from app.models.user import User, UserType

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def get_jwks_client() -> jwt.PyJWKClient:
    if not config.CLERK_JWKS_URL:
        raise RuntimeError("CLERK_JWKS_URL is not configured")
    return jwt.PyJWKClient(config.CLERK_JWKS_URL)


def decode_session_token(token: str) -> Dict[str, Any]:
    signing_key = get_jwks_client().get_signing_key_from_jwt(token)
    options = {"verify_aud": False}
    kwargs = {}
    if config.CLERK_ISSUER:
        kwargs["issuer"] = config.CLERK_ISSUER
    return jwt.decode(token, signing_key.key, algorithms=["RS256"], options=options, **kwargs)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """Verified session claims; ``sub`` is the external auth ID"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or not credentials.credentials:
        raise credentials_exception

    try:
        claims = decode_session_token(credentials.credentials)
    except (jwt.PyJWTError, RuntimeError) as e:
        logger.warning(f"Rejected session token: {str(e)}")
        raise credentials_exception

    if not claims.get("sub"):
        raise credentials_exception
    return claims


def get_or_create_user(db: Session, claims: Dict[str, Any]) -> User:
    """
    Look up the User for the caller's external ID, inserting a default
    startup-role row when none exists yet.
    """
    clerk_id = claims["sub"]
    user = db.query(User).filter(User.clerk_id == clerk_id).first()
    if user:
        return user

    user = User(
        clerk_id=clerk_id,
        email=claims.get("email") or "",
        first_name=claims.get("first_name") or claims.get("firstName") or "",
        last_name=claims.get("last_name") or claims.get("lastName") or "",
        user_type=UserType.STARTUP.value,
        profile_complete=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Another request created the row first
        db.rollback()
        return db.query(User).filter(User.clerk_id == clerk_id).one()

    db.refresh(user)
    logger.info(f"Created user {user.id} for external ID {clerk_id}")
    return user


def get_current_db_user(
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    return get_or_create_user(db, current_user)


def check_role(*roles: UserType):
    allowed = {role.value for role in roles}

    def role_checker(user: User = Depends(get_current_db_user)) -> User:
        if user.user_type not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied - requires role: {', '.join(sorted(allowed))}",
            )
        return user

    return role_checker
