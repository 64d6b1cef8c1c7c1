from bson import ObjectId
from fastapi import HTTPException, status


class InvalidIdError(HTTPException):
    def __init__(self, entity: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {entity.lower()} id"
        )


class NotFoundError(HTTPException):
    def __init__(self, entity: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity} not found"
        )


class DuplicateEntityError(HTTPException):
    """Raised when a unique index (email, APAAR ID, AISHE code, ...) is violated"""

    DETAILS = {
        "User": "Email already exists",
        "Student": "Student with this email or APAAR ID already exists",
        "Teacher": "Teacher with this email or APAR ID already exists",
        "Institution": "Institution with this AISHE code already exists",
        "Scheme": "Scheme with this name already exists",
    }

    def __init__(self, entity: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=self.DETAILS.get(entity, "Duplicate key error encountered.")
        )


class ServerError(HTTPException):
    def __init__(self, detail: str = "Server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail
        )


def require_object_id(value: str, entity: str = "Resource") -> str:
    if not ObjectId.is_valid(value):
        raise InvalidIdError(entity)
    return value
