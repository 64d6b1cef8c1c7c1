"""
API routes for teachers
"""
import logging
import re
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from ..exceptions import DuplicateEntityError, NotFoundError, ServerError, require_object_id
from ..models.teacher import TeacherCreate, TeacherUpdate
from ..services.auth_service import get_current_user, require_roles
from ..services.mongo_service import MongoService, TEACHERS, get_mongo_service
from ..utils.documents import serialize_document
from ..utils.validators import build_search_query, generate_apar_id, teacher_initials

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teachers", tags=["teachers"])

admin_only = require_roles("admin")


def teacher_response(doc: Dict[str, Any]) -> Dict[str, Any]:
    data = serialize_document(doc)
    data["initials"] = teacher_initials(doc.get("name"))
    return data


@router.get("/")
async def get_teachers(
    search: Optional[str] = Query(None, description="Search by name, APAR ID or email"),
    department: Optional[str] = Query(None),
    designation: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=1000),
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Get active teachers, best rated first
    """
    try:
        query = {"is_active": True, **build_search_query(search, ["name", "apar_id", "email"])}
        if department:
            query["department"] = {"$regex": f"^{re.escape(department)}$", "$options": "i"}
        if designation:
            query["designation"] = designation

        teachers = await mongo.find_many(
            TEACHERS, query, sort=[("rating", DESCENDING)], limit=limit
        )
        return {
            "success": True,
            "count": len(teachers),
            "data": [teacher_response(teacher) for teacher in teachers],
        }

    except Exception as e:
        logger.error(f"Get teachers error: {e}")
        raise ServerError()


@router.get("/stats")
async def get_teacher_stats(
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service)
):
    try:
        match = {"is_active": True}
        total = await mongo.count(TEACHERS, match)
        avg_rating = await mongo.average(TEACHERS, "rating", match)
        avg_publications = await mongo.average(TEACHERS, "publications", match)
        by_department = await mongo.group_count(TEACHERS, "department", match)

        return {
            "success": True,
            "data": {
                "total": total,
                "avg_rating": f"{avg_rating or 0:.2f}",
                "avg_publications": round(avg_publications or 0),
                "by_department": by_department,
            }
        }

    except Exception as e:
        logger.error(f"Get teacher stats error: {e}")
        raise ServerError()


@router.get("/{teacher_id}")
async def get_teacher(
    teacher_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(teacher_id, "Teacher")
    try:
        teacher = await mongo.find_by_id(TEACHERS, teacher_id)
        if not teacher:
            raise NotFoundError("Teacher")
        return {"success": True, "data": teacher_response(teacher)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get teacher error: {e}")
        raise ServerError()


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_teacher(
    teacher: TeacherCreate,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Create a teacher, generating the APAR ID when none is given
    """
    try:
        data = teacher.model_dump(exclude_none=True)
        if not data.get("apar_id"):
            data["apar_id"] = generate_apar_id(await mongo.count(TEACHERS))
        data["is_active"] = True

        created = await mongo.insert_one(TEACHERS, data)
        logger.info(f"Teacher created: {created['email']} ({created['apar_id']})")

        return {
            "success": True,
            "message": "Teacher created successfully",
            "data": teacher_response(created),
        }

    except HTTPException:
        raise
    except DuplicateKeyError:
        raise DuplicateEntityError("Teacher")
    except Exception as e:
        logger.error(f"Create teacher error: {e}")
        raise ServerError()


@router.put("/{teacher_id}")
async def update_teacher(
    teacher_id: str,
    update: TeacherUpdate,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(teacher_id, "Teacher")
    try:
        teacher = await mongo.update_by_id(TEACHERS, teacher_id, update.model_dump(exclude_none=True))
        if not teacher:
            raise NotFoundError("Teacher")

        return {
            "success": True,
            "message": "Teacher updated successfully",
            "data": teacher_response(teacher),
        }

    except HTTPException:
        raise
    except DuplicateKeyError:
        raise DuplicateEntityError("Teacher")
    except Exception as e:
        logger.error(f"Update teacher error: {e}")
        raise ServerError()


@router.delete("/{teacher_id}")
async def delete_teacher(
    teacher_id: str,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(teacher_id, "Teacher")
    try:
        teacher = await mongo.update_by_id(TEACHERS, teacher_id, {"is_active": False})
        if not teacher:
            raise NotFoundError("Teacher")
        return {"success": True, "message": "Teacher deleted successfully"}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete teacher error: {e}")
        raise ServerError()
