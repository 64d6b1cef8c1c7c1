"""
API routes for scheme management and scheme matching
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pymongo.errors import DuplicateKeyError

from ..exceptions import DuplicateEntityError, NotFoundError, ServerError, require_object_id
from ..models.scheme import Scheme, SchemeCreate, SchemeUpdate, SchemeType
from ..models.student import StudentProfile
from ..services.auth_service import get_current_user, require_roles
from ..services.eligibility_service import SchemeMatcher, get_scheme_matcher
from ..services.mongo_service import MongoService, SCHEMES, get_mongo_service
from ..utils.documents import serialize_document, serialize_documents
from .students import get_scoped_student

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schemes", tags=["schemes"])

admin_only = require_roles("admin")


async def load_student_profile(
    mongo: MongoService,
    student_id: str,
    user: Dict[str, Any]
) -> StudentProfile:
    require_object_id(student_id, "Student")
    student = await get_scoped_student(mongo, student_id, user)
    return StudentProfile.from_document(student)


@router.get("/")
async def get_schemes(
    type: Optional[SchemeType] = Query(None, description="Filter by scheme type"),
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Get active schemes whose application window is still open
    """
    try:
        schemes = await mongo.get_active_schemes(scheme_type=type)
        return {"success": True, "count": len(schemes), "data": serialize_documents(schemes)}

    except Exception as e:
        logger.error(f"Get schemes error: {e}")
        raise ServerError()


@router.get("/recommended/{student_id}")
async def get_recommended_schemes(
    student_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service),
    matcher: SchemeMatcher = Depends(get_scheme_matcher)
):
    """
    Schemes the student is eligible for, best match first
    """
    try:
        profile = await load_student_profile(mongo, student_id, current_user)
        schemes = await matcher.get_recommended_schemes(profile)

        return {
            "success": True,
            "count": len(schemes),
            "data": [scheme.model_dump() for scheme in schemes],
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get recommended schemes error: {e}")
        raise ServerError()


@router.get("/matches/{student_id}")
async def get_scheme_matches(
    student_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service),
    matcher: SchemeMatcher = Depends(get_scheme_matcher)
):
    """
    Ranked schemes together with their match scores
    """
    try:
        profile = await load_student_profile(mongo, student_id, current_user)
        matches = await matcher.get_scheme_matches(profile)

        return {
            "success": True,
            "count": len(matches),
            "data": [match.model_dump() for match in matches],
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get scheme matches error: {e}")
        raise ServerError()


@router.get("/{scheme_id}")
async def get_scheme(
    scheme_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(scheme_id, "Scheme")
    try:
        scheme = await mongo.find_by_id(SCHEMES, scheme_id)
        if not scheme:
            raise NotFoundError("Scheme")
        return {"success": True, "data": serialize_document(scheme)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get scheme error: {e}")
        raise ServerError()


@router.get("/{scheme_id}/eligibility/{student_id}")
async def check_scheme_eligibility(
    scheme_id: str,
    student_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service),
    matcher: SchemeMatcher = Depends(get_scheme_matcher)
):
    """
    Eligibility verdict, match score and score breakdown for one scheme
    """
    require_object_id(scheme_id, "Scheme")
    try:
        doc = await mongo.find_by_id(SCHEMES, scheme_id)
        if not doc:
            raise NotFoundError("Scheme")

        profile = await load_student_profile(mongo, student_id, current_user)
        scheme = Scheme.model_validate(serialize_document(doc))

        return {"success": True, "data": matcher.explain(scheme, profile)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Check eligibility error: {e}")
        raise ServerError()


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_scheme(
    scheme: SchemeCreate,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    try:
        created = await mongo.insert_one(SCHEMES, scheme.model_dump())
        logger.info(f"Scheme created: {created['name']}")

        return {
            "success": True,
            "message": "Scheme created successfully",
            "data": serialize_document(created),
        }

    except HTTPException:
        raise
    except DuplicateKeyError:
        raise DuplicateEntityError("Scheme")
    except Exception as e:
        logger.error(f"Create scheme error: {e}")
        raise ServerError()


@router.put("/{scheme_id}")
async def update_scheme(
    scheme_id: str,
    update: SchemeUpdate,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(scheme_id, "Scheme")
    try:
        scheme = await mongo.update_by_id(SCHEMES, scheme_id, update.model_dump(exclude_none=True))
        if not scheme:
            raise NotFoundError("Scheme")

        return {
            "success": True,
            "message": "Scheme updated successfully",
            "data": serialize_document(scheme),
        }

    except HTTPException:
        raise
    except DuplicateKeyError:
        raise DuplicateEntityError("Scheme")
    except Exception as e:
        logger.error(f"Update scheme error: {e}")
        raise ServerError()


@router.delete("/{scheme_id}")
async def delete_scheme(
    scheme_id: str,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Deactivate a scheme; it stops appearing in listings and recommendations
    """
    require_object_id(scheme_id, "Scheme")
    try:
        scheme = await mongo.update_by_id(SCHEMES, scheme_id, {"is_active": False})
        if not scheme:
            raise NotFoundError("Scheme")
        return {"success": True, "message": "Scheme deactivated successfully"}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete scheme error: {e}")
        raise ServerError()
