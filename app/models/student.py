"""
Pydantic models for student records
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Literal
from pydantic import BaseModel, Field, EmailStr, ConfigDict, field_validator


LifecycleStageName = Literal[
    'Enrollment', 'Academic Progress', 'Internship', 'Placement', 'Higher Studies', 'Alumni'
]
PlacementStatus = Literal['Not Placed', 'In Process', 'Placed', 'Higher Studies', 'Entrepreneur']
Gender = Literal['Male', 'Female', 'Other']


class StageDocument(BaseModel):
    name: str
    url: str
    upload_date: Optional[datetime] = None
    verified: bool = False


class LifecycleStage(BaseModel):
    """One step of a student's journey from enrollment to alumni"""
    stage: LifecycleStageName
    date: Optional[datetime] = None
    status: Literal['Active', 'Completed', 'In Progress', 'Pending'] = 'In Progress'
    details: Optional[Dict[str, Any]] = None
    documents: List[StageDocument] = Field(default_factory=list)
    notes: Optional[str] = None
    completed_by: Optional[str] = None


class LifecycleStageUpdate(BaseModel):
    """Changes to an existing lifecycle entry; the stage name itself is fixed"""
    date: Optional[datetime] = None
    status: Optional[Literal['Active', 'Completed', 'In Progress', 'Pending']] = None
    details: Optional[Dict[str, Any]] = None
    documents: Optional[List[StageDocument]] = None
    notes: Optional[str] = None
    completed_by: Optional[str] = None


class EnrolledScheme(BaseModel):
    scheme_id: Optional[str] = None
    scheme_name: Optional[str] = None
    application_date: Optional[datetime] = None
    approval_date: Optional[datetime] = None
    status: Literal['Applied', 'Approved', 'Rejected', 'Benefited', 'Completed'] = 'Applied'
    amount: Optional[float] = None


class PlacementDetails(BaseModel):
    company: Optional[str] = None
    package: Optional[float] = None
    role: Optional[str] = None
    joining_date: Optional[datetime] = None
    offer_letter: Optional[str] = None


class StudentBase(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = Field(default=None, pattern=r"^[0-9]{10}$")
    date_of_birth: Optional[datetime] = None
    gender: Optional[Gender] = None
    aadhaar_number: Optional[str] = Field(default=None, pattern=r"^[0-9]{12}$")
    aadhaar_verified: bool = False
    apaar_id: Optional[str] = None
    course: str = Field(..., min_length=1)
    semester: Optional[int] = Field(default=None, ge=1, le=10)
    batch: Optional[str] = None
    enrollment_number: Optional[str] = None
    cgpa: float = Field(default=0, ge=0, le=10)
    attendance: float = Field(default=0, ge=0, le=100)
    assignments: float = Field(default=0, ge=0, le=100)
    achievements: List[str] = Field(default_factory=list)
    schemes: List[str] = Field(default_factory=list)
    enrolled_schemes: List[EnrolledScheme] = Field(default_factory=list)
    institution: Optional[str] = None
    current_stage: LifecycleStageName = 'Enrollment'
    placement_status: PlacementStatus = 'Not Placed'
    placement_details: Optional[PlacementDetails] = None
    alumni_status: bool = False

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    @field_validator('name', 'course')
    @classmethod
    def strip_text(cls, v):
        return v.strip()


class StudentCreate(StudentBase):
    """Input for creating a student"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Asha Rao",
                "email": "asha.rao@example.edu",
                "phone": "9876543210",
                "course": "B.Tech CSE",
                "semester": 5,
                "cgpa": 8.2,
                "attendance": 88,
                "batch": "2023-2027"
            }
        }
    )


class StudentUpdate(BaseModel):
    """Partial student update; only supplied fields are written"""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=r"^[0-9]{10}$")
    date_of_birth: Optional[datetime] = None
    gender: Optional[Gender] = None
    aadhaar_number: Optional[str] = Field(default=None, pattern=r"^[0-9]{12}$")
    aadhaar_verified: Optional[bool] = None
    course: Optional[str] = None
    semester: Optional[int] = Field(default=None, ge=1, le=10)
    batch: Optional[str] = None
    enrollment_number: Optional[str] = None
    cgpa: Optional[float] = Field(default=None, ge=0, le=10)
    attendance: Optional[float] = Field(default=None, ge=0, le=100)
    assignments: Optional[float] = Field(default=None, ge=0, le=100)
    achievements: Optional[List[str]] = None
    schemes: Optional[List[str]] = None
    enrolled_schemes: Optional[List[EnrolledScheme]] = None
    institution: Optional[str] = None
    current_stage: Optional[LifecycleStageName] = None
    placement_status: Optional[PlacementStatus] = None
    placement_details: Optional[PlacementDetails] = None
    alumni_status: Optional[bool] = None
    is_active: Optional[bool] = None


class StudentProfile(BaseModel):
    """The slice of a student consumed by scheme matching"""
    cgpa: float = 0
    attendance: float = 0
    course: Optional[str] = None
    semester: Optional[int] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "StudentProfile":
        return cls(
            cgpa=doc.get("cgpa") or 0,
            attendance=doc.get("attendance") or 0,
            course=doc.get("course"),
            semester=doc.get("semester"),
        )


class BulkDeleteRequest(BaseModel):
    ids: List[str]
