"""
Authentication: password hashing, JWT handling and role checks
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from ..config import settings
from ..models.user import TokenData
from ..utils.validators import is_valid_object_id
from .mongo_service import MongoService, USERS, get_mongo_service

logger = logging.getLogger(__name__)

ALLOWED_ROLES = ("admin", "student", "institution")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error is off so a missing header yields our own 401 message
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token carrying the user id and role."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": user_id,
        "role": role,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenData:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise _unauthorized("Token invalid or expired")

    user_id = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Token invalid or expired")
    return TokenData(user_id=user_id, role=payload.get("role"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    mongo: MongoService = Depends(get_mongo_service),
) -> Dict[str, Any]:
    """Resolve the bearer token to an active user document."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authorized, no token")

    token_data = verify_token(credentials.credentials)
    if not is_valid_object_id(token_data.user_id):
        raise _unauthorized("Token invalid or expired")

    user = await mongo.find_by_id(USERS, token_data.user_id)
    if user is None:
        raise _unauthorized("User not found")

    if not user.get("is_active", True):
        raise _unauthorized("Account deactivated")

    return user


def require_roles(*roles: str):
    """Dependency factory restricting a route to the given roles."""

    async def role_checker(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        role = current_user.get("role")
        if role not in roles:
            logger.warning(f"Role '{role}' denied access; allowed roles: {roles}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Role '{role}' not authorized for this route",
            )
        return current_user

    return role_checker


async def authenticate_user(mongo: MongoService, email: str, password: str) -> Dict[str, Any]:
    """
    Look up a user by email and check the password

    Raises:
        HTTPException: 404 for unknown email, 401 for a deactivated
            account or a wrong password
    """
    user = await mongo.find_one(USERS, {"email": email})
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if not user.get("is_active", True):
        raise _unauthorized("Account deactivated")

    if not verify_password(password, user["password"]):
        raise _unauthorized("Wrong password")

    return user
