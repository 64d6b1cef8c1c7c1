"""
Utility functions for validation, identifiers and derived student fields
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
from bson import ObjectId


EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
PHONE_PATTERN = re.compile(r"^[0-9]{10}$")

# Fields counted towards a student's profile completeness
PROFILE_FIELDS = [
    'name', 'email', 'phone', 'date_of_birth', 'gender', 'aadhaar_verified',
    'course', 'semester', 'batch', 'enrollment_number', 'institution'
]

# Thresholds below which a student is flagged as a dropout risk
AT_RISK_ATTENDANCE = 75
AT_RISK_CGPA = 6.0
AT_RISK_ASSIGNMENTS = 60


def is_valid_object_id(value: Optional[str]) -> bool:
    """Check whether a string is a valid MongoDB ObjectId"""
    return bool(value) and ObjectId.is_valid(value)


def validate_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def validate_phone(phone: Optional[str]) -> bool:
    if not phone:
        return False
    return bool(PHONE_PATTERN.match(phone.strip()))


def build_search_query(search: Optional[str], fields: Iterable[str]) -> Dict[str, Any]:
    """
    Build a case-insensitive ``$or`` regex query over several fields

    Args:
        search: Free-text search term (regex metacharacters are escaped)
        fields: Document fields to search

    Returns:
        A query fragment, empty when there is nothing to search for
    """
    if not search or not search.strip():
        return {}

    pattern = re.escape(search.strip())
    return {
        "$or": [
            {field: {"$regex": pattern, "$options": "i"}}
            for field in fields
        ]
    }


def generate_apaar_id(existing_count: int, year: Optional[int] = None) -> str:
    """
    Generate an APAAR ID (Academic Performance Assessment and Advancement Report)

    Args:
        existing_count: Number of students already stored
        year: Year component (defaults to the current UTC year)

    Returns:
        ID in the form ``APAAR-2026-000042``
    """
    if year is None:
        year = datetime.now(timezone.utc).year
    return f"APAAR-{year}-{existing_count + 1:06d}"


def generate_apar_id(existing_count: int, year: Optional[int] = None) -> str:
    """Generate a teacher APAR ID in the form ``APAR2026007``"""
    if year is None:
        year = datetime.now(timezone.utc).year
    return f"APAR{year}{existing_count + 1:03d}"


def teacher_initials(name: Optional[str]) -> str:
    if not name:
        return ""
    initials = "".join(word[0] for word in name.split() if word)
    return initials.upper()[:3]


def profile_completeness(student: Dict[str, Any]) -> int:
    """Percentage of profile fields that are filled in, rounded"""
    filled = sum(1 for field in PROFILE_FIELDS if student.get(field))
    return int(round(filled * 100 / len(PROFILE_FIELDS)))


def split_list_field(value: Any) -> List[str]:
    """Split a ``;``-separated CSV cell into a clean list"""
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return [part.strip() for part in str(value).split(';') if part.strip()]


def _optional_text(row: Dict[str, Any], key: str) -> Optional[str]:
    value = row.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _number(row: Dict[str, Any], key: str, cast=float, default=None):
    value = row.get(key)
    if value in (None, ""):
        return default
    return cast(value)


def parse_bulk_student_row(row: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Turn one raw bulk-upload row into student fields

    Args:
        row: A JSON object as produced by a CSV import

    Returns:
        ``(student_data, None)`` on success or ``(None, error_message)``
    """
    if not isinstance(row, dict):
        return None, "Row must be an object"

    if not row.get('name') or not row.get('email') or not row.get('course'):
        return None, "Missing required fields (name, email, or course)"

    email = str(row['email']).strip().lower()
    if not validate_email(email):
        return None, f"Invalid email: {email}"

    try:
        data = {
            "name": str(row['name']).strip(),
            "email": email,
            "course": str(row['course']).strip(),
            "semester": _number(row, 'semester', cast=lambda v: int(float(v))),
            "cgpa": _number(row, 'cgpa', default=0.0),
            "attendance": _number(row, 'attendance', default=0.0),
            "assignments": _number(row, 'assignments', default=0.0),
            "phone": _optional_text(row, 'phone'),
            "gender": _optional_text(row, 'gender'),
            "batch": _optional_text(row, 'batch'),
            "enrollment_number": _optional_text(row, 'enrollment_number'),
            "aadhaar_number": _optional_text(row, 'aadhaar_number'),
        }
        if row.get('date_of_birth'):
            data["date_of_birth"] = datetime.fromisoformat(str(row['date_of_birth']).strip())
    except (ValueError, TypeError) as e:
        return None, f"Invalid value: {e}"

    if row.get('achievements'):
        data["achievements"] = split_list_field(row['achievements'])
    if row.get('schemes'):
        data["schemes"] = split_list_field(row['schemes'])

    return {key: value for key, value in data.items() if value is not None}, None
