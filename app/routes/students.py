"""
API routes for student records, bulk import and lifecycle tracking
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError
from pydantic import ValidationError

from ..exceptions import DuplicateEntityError, NotFoundError, ServerError, require_object_id
from ..models.student import (
    BulkDeleteRequest,
    LifecycleStage,
    LifecycleStageName,
    LifecycleStageUpdate,
    StudentCreate,
    StudentUpdate,
)
from ..services.auth_service import require_roles
from ..services.mongo_service import (
    MongoService,
    NEWEST_FIRST,
    STUDENTS,
    get_mongo_service,
    utc_now,
)
from ..utils.crypto import encrypt_aadhaar
from ..utils.documents import serialize_document, serialize_documents
from ..utils.validators import (
    AT_RISK_ASSIGNMENTS,
    AT_RISK_ATTENDANCE,
    AT_RISK_CGPA,
    build_search_query,
    generate_apaar_id,
    is_valid_object_id,
    parse_bulk_student_row,
    profile_completeness,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["students"])

staff_only = require_roles("admin", "institution")
admin_only = require_roles("admin")


def scope_query(query: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    """Restrict a query to the institution's own students for institution users"""
    if user.get("role") == "institution":
        query["institution"] = str(user["_id"])
    return query


async def get_scoped_student(
    mongo: MongoService,
    student_id: str,
    user: Dict[str, Any]
) -> Dict[str, Any]:
    student = await mongo.find_by_id(STUDENTS, student_id)
    if not student:
        raise NotFoundError("Student")
    if user.get("role") == "institution" and student.get("institution") != str(user["_id"]):
        raise NotFoundError("Student")
    return student


async def prepare_new_student(mongo: MongoService, data: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in the generated APAAR ID and derived fields of a new student"""
    if not data.get("apaar_id"):
        data["apaar_id"] = generate_apaar_id(await mongo.count(STUDENTS))
    if data.get("aadhaar_number"):
        data["aadhaar_number"] = encrypt_aadhaar(data["aadhaar_number"])
    data.setdefault("is_active", True)
    data["profile_completeness"] = profile_completeness(data)
    return data


@router.get("/")
async def get_students(
    search: Optional[str] = Query(None, description="Search by name, APAAR ID or email"),
    course: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=1000),
    current_user: Dict[str, Any] = Depends(staff_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Get active students with optional search and course filter
    """
    try:
        query = {"is_active": True, **build_search_query(search, ["name", "apaar_id", "email"])}
        if course:
            query["course"] = course
        scope_query(query, current_user)

        students = await mongo.find_many(STUDENTS, query, sort=NEWEST_FIRST, limit=limit)
        return {"success": True, "count": len(students), "data": serialize_documents(students)}

    except Exception as e:
        logger.error(f"Get students error: {e}")
        raise ServerError()


@router.get("/stats")
async def get_student_stats(
    current_user: Dict[str, Any] = Depends(staff_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    try:
        match = scope_query({"is_active": True}, current_user)
        total = await mongo.count(STUDENTS, match)
        avg_cgpa = await mongo.average(STUDENTS, "cgpa", match)
        by_course = await mongo.group_count(STUDENTS, "course", match)

        return {
            "success": True,
            "data": {
                "total": total,
                "active": total,
                "avg_cgpa": f"{avg_cgpa or 0:.2f}",
                "by_course": by_course,
            }
        }

    except Exception as e:
        logger.error(f"Get student stats error: {e}")
        raise ServerError()


@router.get("/at-risk")
async def get_at_risk_students(
    current_user: Dict[str, Any] = Depends(staff_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Students at risk of dropping out: low attendance, CGPA or assignment completion
    """
    try:
        query = scope_query({
            "is_active": True,
            "$or": [
                {"attendance": {"$lt": AT_RISK_ATTENDANCE}},
                {"cgpa": {"$lt": AT_RISK_CGPA}},
                {"assignments": {"$lt": AT_RISK_ASSIGNMENTS}},
            ]
        }, current_user)

        students = await mongo.find_many(STUDENTS, query, sort=[("attendance", ASCENDING)])
        return {"success": True, "count": len(students), "data": serialize_documents(students)}

    except Exception as e:
        logger.error(f"Get at-risk students error: {e}")
        raise ServerError()


@router.get("/stage/{stage}")
async def get_students_by_stage(
    stage: LifecycleStageName,
    current_user: Dict[str, Any] = Depends(staff_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    try:
        query = scope_query({"current_stage": stage, "is_active": True}, current_user)
        students = await mongo.find_many(STUDENTS, query, sort=NEWEST_FIRST)
        return {"success": True, "count": len(students), "data": serialize_documents(students)}

    except Exception as e:
        logger.error(f"Get students by stage error: {e}")
        raise ServerError()


@router.post("/bulk-add")
async def bulk_add_students(
    rows: List[Any] = Body(...),
    current_user: Dict[str, Any] = Depends(staff_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Bulk add students from CSV rows

    Each row is validated on its own; failures are reported per row and do not
    stop the rest of the import.
    """
    if not rows:
        raise HTTPException(
            status_code=400,
            detail="Invalid data format. Expected an array of student records."
        )

    results = {"successful": [], "failed": [], "total": len(rows)}

    for index, row in enumerate(rows, start=1):
        data, error = parse_bulk_student_row(row)
        if error:
            results["failed"].append({"row": index, "data": row, "error": error})
            continue

        try:
            data = StudentCreate.model_validate(data).model_dump(exclude_none=True)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            results["failed"].append({"row": index, "data": row, "error": f"{field}: {first['msg']}"})
            continue

        try:
            if await mongo.find_one(STUDENTS, {"email": data["email"]}):
                results["failed"].append({
                    "row": index,
                    "data": row,
                    "error": f"Student with email {data['email']} already exists"
                })
                continue

            if current_user.get("role") == "institution":
                data["institution"] = str(current_user["_id"])

            student = await mongo.insert_one(STUDENTS, await prepare_new_student(mongo, data))
            results["successful"].append({
                "row": index,
                "student_id": str(student["_id"]),
                "name": student["name"],
                "email": student["email"],
                "apaar_id": student.get("apaar_id"),
            })

        except DuplicateKeyError:
            results["failed"].append({
                "row": index,
                "data": row,
                "error": DuplicateEntityError.DETAILS["Student"]
            })
        except Exception as e:
            logger.error(f"Bulk add row {index} error: {e}")
            results["failed"].append({"row": index, "data": row, "error": str(e)})

    succeeded = len(results["successful"])
    failed = len(results["failed"])
    logger.info(f"Bulk add completed: {succeeded} successful, {failed} failed")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST if failed == len(rows) else status.HTTP_200_OK,
        content={
            "success": succeeded > 0,
            "message": f"Bulk add completed: {succeeded} successful, {failed} failed",
            "data": results,
        }
    )


@router.post("/bulk-delete")
async def bulk_delete_students(
    request: BulkDeleteRequest,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Permanently delete several students
    """
    if not request.ids:
        raise HTTPException(
            status_code=400,
            detail="Invalid data format. Expected an array of student IDs."
        )

    results = {"successful": [], "failed": [], "total": len(request.ids)}

    for student_id in request.ids:
        if not is_valid_object_id(student_id):
            results["failed"].append({"id": student_id, "error": "Invalid student id"})
            continue

        try:
            student = await mongo.find_by_id(STUDENTS, student_id)
            if not student:
                results["failed"].append({"id": student_id, "error": "Student not found"})
                continue

            await mongo.delete_by_id(STUDENTS, student_id)
            results["successful"].append({
                "id": student_id,
                "name": student.get("name"),
                "email": student.get("email"),
            })

        except Exception as e:
            logger.error(f"Bulk delete {student_id} error: {e}")
            results["failed"].append({"id": student_id, "error": str(e)})

    succeeded = len(results["successful"])
    failed = len(results["failed"])
    return {
        "success": succeeded > 0,
        "message": f"Bulk delete completed: {succeeded} deleted, {failed} failed",
        "data": results,
    }


@router.get("/{student_id}")
async def get_student(
    student_id: str,
    current_user: Dict[str, Any] = Depends(require_roles("admin", "institution", "student")),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(student_id, "Student")
    try:
        student = await get_scoped_student(mongo, student_id, current_user)
        return {"success": True, "data": serialize_document(student)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get student error: {e}")
        raise ServerError()


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_student(
    student: StudentCreate,
    current_user: Dict[str, Any] = Depends(staff_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Create a student, generating the APAAR ID when none is given
    """
    try:
        data = student.model_dump(exclude_none=True)
        if current_user.get("role") == "institution":
            data["institution"] = str(current_user["_id"])

        created = await mongo.insert_one(STUDENTS, await prepare_new_student(mongo, data))
        logger.info(f"Student created: {created['email']} ({created['apaar_id']})")

        return {
            "success": True,
            "message": "Student created successfully",
            "data": serialize_document(created),
        }

    except HTTPException:
        raise
    except DuplicateKeyError:
        raise DuplicateEntityError("Student")
    except Exception as e:
        logger.error(f"Create student error: {e}")
        raise ServerError()


@router.put("/{student_id}")
async def update_student(
    student_id: str,
    update: StudentUpdate,
    current_user: Dict[str, Any] = Depends(staff_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    require_object_id(student_id, "Student")
    try:
        existing = await get_scoped_student(mongo, student_id, current_user)

        fields = update.model_dump(exclude_none=True)
        if current_user.get("role") == "institution":
            fields.pop("is_active", None)
            fields["institution"] = str(current_user["_id"])
        if fields.get("aadhaar_number"):
            fields["aadhaar_number"] = encrypt_aadhaar(fields["aadhaar_number"])
        fields["profile_completeness"] = profile_completeness({**existing, **fields})

        student = await mongo.update_by_id(STUDENTS, student_id, fields)
        if not student:
            raise NotFoundError("Student")

        return {
            "success": True,
            "message": "Student updated successfully",
            "data": serialize_document(student),
        }

    except HTTPException:
        raise
    except DuplicateKeyError:
        raise DuplicateEntityError("Student")
    except Exception as e:
        logger.error(f"Update student error: {e}")
        raise ServerError()


@router.delete("/{student_id}")
async def delete_student(
    student_id: str,
    current_user: Dict[str, Any] = Depends(admin_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Delete student (soft delete)
    """
    require_object_id(student_id, "Student")
    try:
        student = await mongo.update_by_id(STUDENTS, student_id, {"is_active": False})
        if not student:
            raise NotFoundError("Student")
        return {"success": True, "message": "Student deleted successfully"}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete student error: {e}")
        raise ServerError()


@router.post("/{student_id}/lifecycle")
async def add_lifecycle_stage(
    student_id: str,
    stage: LifecycleStage,
    current_user: Dict[str, Any] = Depends(staff_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Append a lifecycle stage and make it the student's current stage
    """
    require_object_id(student_id, "Student")
    try:
        await get_scoped_student(mongo, student_id, current_user)

        entry = stage.model_dump()
        if entry.get("date") is None:
            entry["date"] = utc_now()
        if not entry.get("completed_by"):
            entry["completed_by"] = str(current_user["_id"])

        student = await mongo.push_by_id(
            STUDENTS,
            student_id,
            "lifecycle_stages",
            entry,
            extra_fields={"current_stage": stage.stage}
        )
        if not student:
            raise NotFoundError("Student")

        logger.info(f"Student {student_id} moved to stage {stage.stage}")
        return {
            "success": True,
            "message": f"Lifecycle stage '{stage.stage}' added",
            "data": serialize_document(student),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Add lifecycle stage error: {e}")
        raise ServerError()


@router.put("/{student_id}/lifecycle/{index}")
async def update_lifecycle_stage(
    student_id: str,
    index: int,
    update: LifecycleStageUpdate,
    current_user: Dict[str, Any] = Depends(staff_only),
    mongo: MongoService = Depends(get_mongo_service)
):
    """
    Update an existing lifecycle entry, addressed by its position in the history
    """
    require_object_id(student_id, "Student")
    try:
        student = await get_scoped_student(mongo, student_id, current_user)

        stages = list(student.get("lifecycle_stages") or [])
        if index < 0 or index >= len(stages):
            raise NotFoundError("Lifecycle stage")

        stages[index] = {**stages[index], **update.model_dump(exclude_none=True)}

        student = await mongo.update_by_id(STUDENTS, student_id, {"lifecycle_stages": stages})
        if not student:
            raise NotFoundError("Student")

        return {
            "success": True,
            "message": f"Lifecycle stage '{stages[index]['stage']}' updated",
            "data": serialize_document(student),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update lifecycle stage error: {e}")
        raise ServerError()
