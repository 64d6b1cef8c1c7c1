"""
Utility functions for the Student Information System backend
"""

from .validators import (
    is_valid_object_id,
    validate_email,
    validate_phone,
    build_search_query,
    generate_apaar_id,
    generate_apar_id,
    teacher_initials,
    profile_completeness,
    parse_bulk_student_row
)
from .documents import serialize_document, serialize_documents

__all__ = [
    "is_valid_object_id",
    "validate_email",
    "validate_phone",
    "build_search_query",
    "generate_apaar_id",
    "generate_apar_id",
    "teacher_initials",
    "profile_completeness",
    "parse_bulk_student_row",
    "serialize_document",
    "serialize_documents"
]
