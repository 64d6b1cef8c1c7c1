"""
Role dashboards and the current-user endpoint
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..services.auth_service import get_current_user, require_roles
from ..services.mongo_service import MongoService, get_mongo_service
from .auth import public_user

router = APIRouter(tags=["dashboard"])


def welcome(role: str, title: str, user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "success": True,
        "message": f"Welcome to {title} Dashboard!",
        "data": {
            "role": role,
            "user": user.get("name"),
            "email": user.get("email"),
        },
    }


@router.get("/admin/dashboard")
async def admin_dashboard(
    current_user: Dict[str, Any] = Depends(require_roles("admin")),
    mongo: MongoService = Depends(get_mongo_service)
):
    payload = welcome("admin", "Admin", current_user)
    payload["data"]["stats"] = await mongo.get_database_stats()
    return payload


@router.get("/institution/dashboard")
async def institution_dashboard(current_user: Dict[str, Any] = Depends(require_roles("institution"))):
    return welcome("institution", "Institution", current_user)


@router.get("/student/dashboard")
async def student_dashboard(current_user: Dict[str, Any] = Depends(require_roles("student"))):
    return welcome("student", "Student", current_user)


@router.get("/me")
async def me(current_user: Dict[str, Any] = Depends(get_current_user)):
    """Current user info for any authenticated role"""
    return {"success": True, "user": public_user(current_user)}
