"""
API routes for user administration
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..exceptions import NotFoundError, ServerError, require_object_id
from ..models.user import UserUpdate
from ..services.auth_service import require_roles
from ..services.mongo_service import MongoService, USERS, NEWEST_FIRST, get_mongo_service
from ..utils.documents import serialize_document, serialize_documents
from ..utils.validators import build_search_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

admin_only = require_roles("admin")


@router.get("/")
async def get_users(
    search: Optional[str] = Query(None, description="Search by name or email"),
    role: Optional[str] = Query(None, description="Filter by role"),
    limit: int = Query(50, ge=1, le=1000),
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Get all users with optional search and role filter
    """
    try:
        query = build_search_query(search, ["name", "email"])
        if role:
            query["role"] = role

        users = await mongo.find_many(USERS, query, sort=NEWEST_FIRST, limit=limit)
        return {"success": True, "count": len(users), "data": serialize_documents(users)}

    except Exception as e:
        logger.error(f"Get users error: {e}")
        raise ServerError()


@router.get("/stats")
async def get_user_stats(
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Get user statistics
    """
    try:
        total = await mongo.count(USERS)
        active = await mongo.count(USERS, {"is_active": True})
        by_role = await mongo.group_count(USERS, "role")
        recent = await mongo.find_many(USERS, {}, sort=NEWEST_FIRST, limit=5)

        return {
            "success": True,
            "data": {
                "total": total,
                "active": active,
                "inactive": total - active,
                "by_role": by_role,
                "recent_users": serialize_documents(recent),
            }
        }

    except Exception as e:
        logger.error(f"Get user stats error: {e}")
        raise ServerError()


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(user_id, "User")
    try:
        user = await mongo.find_by_id(USERS, user_id)
        if not user:
            raise NotFoundError("User")
        return {"success": True, "data": serialize_document(user)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get user error: {e}")
        raise ServerError()


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    update: UserUpdate,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Update a user's name, role or active status
    """
    require_object_id(user_id, "User")
    try:
        fields = update.model_dump(exclude_none=True)
        user = await mongo.update_by_id(USERS, user_id, fields)
        if not user:
            raise NotFoundError("User")

        return {
            "success": True,
            "message": "User updated successfully",
            "data": serialize_document(user),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update user error: {e}")
        raise ServerError()


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Deactivate a user (soft delete)
    """
    require_object_id(user_id, "User")
    try:
        user = await mongo.find_by_id(USERS, user_id)
        if not user:
            raise NotFoundError("User")

        if str(user["_id"]) == str(current_user["_id"]):
            raise HTTPException(status_code=400, detail="Cannot delete your own account")

        await mongo.update_by_id(USERS, user_id, {"is_active": False})
        return {"success": True, "message": "User deactivated successfully"}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete user error: {e}")
        raise ServerError()


@router.put("/{user_id}/toggle-status")
async def toggle_user_status(
    user_id: str,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(user_id, "User")
    try:
        user = await mongo.find_by_id(USERS, user_id)
        if not user:
            raise NotFoundError("User")

        is_active = not user.get("is_active", True)
        await mongo.update_by_id(USERS, user_id, {"is_active": is_active})

        return {
            "success": True,
            "message": f"User {'activated' if is_active else 'deactivated'} successfully",
            "data": {"is_active": is_active},
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Toggle status error: {e}")
        raise ServerError()
