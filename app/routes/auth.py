"""
API routes for registration, login and the current user
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.errors import DuplicateKeyError

from ..exceptions import DuplicateEntityError, ServerError
from ..models.user import UserCreate, UserLogin, Token
from ..services.auth_service import (
    ALLOWED_ROLES,
    authenticate_user,
    create_access_token,
    get_current_user,
    get_password_hash,
)
from ..services.mongo_service import MongoService, USERS, get_mongo_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user.get("role"),
    }


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, mongo: MongoService = Depends(get_mongo_service)):
    """Register a new user and return a token right away"""
    logger.info(f"Registration attempt for email: {user.email}")

    try:
        if await mongo.find_one(USERS, {"email": user.email}):
            raise HTTPException(status_code=400, detail="Email already exists")

        if user.role not in ALLOWED_ROLES:
            raise HTTPException(status_code=400, detail="Invalid role")

        created = await mongo.insert_one(USERS, {
            "name": user.name,
            "email": user.email,
            "password": get_password_hash(user.password),
            "role": user.role,
            "is_active": True,
        })

        user_id = str(created["_id"])
        logger.info(f"User registered successfully: {user.email}")
        return Token(
            message="User registered successfully",
            token=create_access_token(user_id, user.role),
            user_id=user_id,
            role=user.role,
            name=user.name,
        )

    except HTTPException:
        raise
    except DuplicateKeyError:
        raise DuplicateEntityError("User")
    except Exception as e:
        logger.error(f"Register error: {e}")
        raise ServerError()


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, mongo: MongoService = Depends(get_mongo_service)):
    """Authenticate with email and password"""
    logger.info(f"Login attempt for email: {credentials.email}")

    try:
        user = await authenticate_user(mongo, credentials.email, credentials.password)

        user_id = str(user["_id"])
        logger.info(f"User logged in successfully: {credentials.email}")
        return Token(
            token=create_access_token(user_id, user["role"]),
            user_id=user_id,
            role=user["role"],
            name=user["name"],
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login error: {e}")
        raise ServerError()


@router.get("/me")
async def get_me(current_user: Dict[str, Any] = Depends(get_current_user)):
    """Get current user information"""
    return {"success": True, "user": public_user(current_user)}
