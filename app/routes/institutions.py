"""
API routes for institutions
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from ..exceptions import DuplicateEntityError, NotFoundError, ServerError, require_object_id
from ..models.institution import InstitutionCreate, InstitutionUpdate
from ..services.auth_service import get_current_user, require_roles
from ..services.mongo_service import INSTITUTIONS, MongoService, get_mongo_service
from ..utils.documents import serialize_document, serialize_documents
from ..utils.validators import build_search_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/institutions", tags=["institutions"])

admin_only = require_roles("admin")

BY_NIRF = [("nirf_score", DESCENDING)]


@router.get("/")
async def get_institutions(
    search: Optional[str] = Query(None, description="Search by name, AISHE code or location"),
    type: Optional[str] = Query(None, description="Filter by institution type"),
    limit: int = Query(50, ge=1, le=1000),
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service)
):
    try:
        query = {"is_active": True, **build_search_query(search, ["name", "aishe_code", "location"])}
        if type:
            query["type"] = type

        institutions = await mongo.find_many(INSTITUTIONS, query, sort=BY_NIRF, limit=limit)
        return {
            "success": True,
            "count": len(institutions),
            "data": serialize_documents(institutions),
        }

    except Exception as e:
        logger.error(f"Get institutions error: {e}")
        raise ServerError()


@router.get("/stats")
async def get_institution_stats(
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Totals, averages and the five best NIRF-ranked institutions
    """
    try:
        match = {"is_active": True}
        total = await mongo.count(INSTITUTIONS, match)
        avg_nirf = await mongo.average(INSTITUTIONS, "nirf_score", match)
        avg_compliance = await mongo.average(INSTITUTIONS, "compliance", match)
        top = await mongo.find_many(INSTITUTIONS, match, sort=BY_NIRF, limit=5)

        return {
            "success": True,
            "data": {
                "total": total,
                "avg_nirf": f"{avg_nirf or 0:.2f}",
                "avg_compliance": f"{avg_compliance or 0:.2f}",
                "top_institutions": serialize_documents(top),
            }
        }

    except Exception as e:
        logger.error(f"Get institution stats error: {e}")
        raise ServerError()


@router.get("/{institution_id}")
async def get_institution(
    institution_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(institution_id, "Institution")
    try:
        institution = await mongo.find_by_id(INSTITUTIONS, institution_id)
        if not institution:
            raise NotFoundError("Institution")
        return {"success": True, "data": serialize_document(institution)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get institution error: {e}")
        raise ServerError()


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_institution(
    institution: InstitutionCreate,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    try:
        data = institution.model_dump(exclude_none=True)
        data["is_active"] = True

        created = await mongo.insert_one(INSTITUTIONS, data)
        logger.info(f"Institution created: {created['name']} ({created['aishe_code']})")

        return {
            "success": True,
            "message": "Institution created successfully",
            "data": serialize_document(created),
        }

    except HTTPException:
        raise
    except DuplicateKeyError:
        raise DuplicateEntityError("Institution")
    except Exception as e:
        logger.error(f"Create institution error: {e}")
        raise ServerError()


@router.put("/{institution_id}")
async def update_institution(
    institution_id: str,
    update: InstitutionUpdate,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(institution_id, "Institution")
    try:
        institution = await mongo.update_by_id(
            INSTITUTIONS, institution_id, update.model_dump(exclude_none=True)
        )
        if not institution:
            raise NotFoundError("Institution")

        return {
            "success": True,
            "message": "Institution updated successfully",
            "data": serialize_document(institution),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update institution error: {e}")
        raise ServerError()


@router.delete("/{institution_id}")
async def delete_institution(
    institution_id: str,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(institution_id, "Institution")
    try:
        institution = await mongo.update_by_id(INSTITUTIONS, institution_id, {"is_active": False})
        if not institution:
            raise NotFoundError("Institution")
        return {"success": True, "message": "Institution deleted successfully"}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete institution error: {e}")
        raise ServerError()
