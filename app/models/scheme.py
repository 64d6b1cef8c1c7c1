"""
Pydantic models for financial-aid schemes and match results
"""
from datetime import datetime, timezone
from typing import List, Optional, Literal
from pydantic import BaseModel, Field, ConfigDict, model_validator


def get_current_utc_time():
    """Get current UTC time for default values"""
    return datetime.now(timezone.utc)


SchemeType = Literal['Scholarship', 'Fellowship', 'Loan', 'Grant', 'Award', 'Subsidy', 'Other']
SchemeLevel = Literal['Central', 'State', 'District', 'University', 'Institution']
SchemeCategory = Literal[
    'Merit Based', 'Need Based', 'Reserved Category', 'Sports', 'Cultural', 'Research', 'General'
]


class IncomeRange(BaseModel):
    """Family income bounds (informational)"""
    min: Optional[float] = None
    max: Optional[float] = None


class EligibilityCriteria(BaseModel):
    """
    Eligibility rules embedded in a scheme.

    ``courses`` and ``semesters`` accept every student when they are absent
    or empty. ``categories``, ``family_income`` and ``special_criteria`` are
    informational and never evaluated.
    """
    min_cgpa: float = Field(default=0, description="Lowest accepted CGPA")
    max_cgpa: float = Field(default=10, description="Highest accepted CGPA")
    min_attendance: float = Field(default=0, description="Minimum attendance percentage")
    courses: Optional[List[str]] = Field(default=None, description="Eligible courses, empty means all")
    semesters: Optional[List[int]] = Field(default=None, description="Eligible semesters, empty means all")
    categories: List[str] = Field(default_factory=list, description="SC/ST/OBC/General")
    family_income: Optional[IncomeRange] = None
    special_criteria: Optional[str] = None

    @property
    def is_well_formed(self) -> bool:
        return self.min_cgpa <= self.max_cgpa

    def accepts_course(self, course: Optional[str]) -> bool:
        if not self.courses:
            return True
        return course in self.courses

    def accepts_semester(self, semester: Optional[int]) -> bool:
        if not self.semesters:
            return True
        return semester in self.semesters


class SchemeAmount(BaseModel):
    min: float = 0
    max: float = 0
    type: Literal['Fixed', 'Variable', 'Range'] = 'Fixed'


class RequiredDocument(BaseModel):
    name: str
    mandatory: bool = True
    format: Optional[str] = None


class SchemeBase(BaseModel):
    """Fields shared by stored schemes and admin input"""
    name: str = Field(..., min_length=1, description="Unique scheme name")
    short_name: Optional[str] = None
    description: str = Field(..., min_length=1)
    type: SchemeType
    amount: SchemeAmount = Field(default_factory=SchemeAmount)
    department: str = Field(..., min_length=1)
    ministry: Optional[str] = None
    level: SchemeLevel = 'Central'
    eligibility_criteria: EligibilityCriteria = Field(default_factory=EligibilityCriteria)
    application_start_date: Optional[datetime] = None
    application_end_date: Optional[datetime] = None
    application_process: Literal['Online', 'Offline', 'Both'] = 'Online'
    application_url: Optional[str] = None
    documents_required: List[RequiredDocument] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    terms_and_conditions: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    helpline_number: Optional[str] = None
    website_url: Optional[str] = None
    total_applicants: int = 0
    total_beneficiaries: int = 0
    current_year_budget: float = 0
    is_active: bool = True
    tags: List[str] = Field(default_factory=list)
    category: SchemeCategory = 'General'


class Scheme(SchemeBase):
    """Scheme document as stored in MongoDB"""
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


class SchemeCreate(SchemeBase):
    """Admin input for a new scheme"""

    @model_validator(mode="after")
    def check_cgpa_bounds(self):
        criteria = self.eligibility_criteria
        if not criteria.is_well_formed:
            raise ValueError("min_cgpa must not exceed max_cgpa")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Post Matric Scholarship",
                "description": "Scholarship for students pursuing post-matric courses",
                "type": "Scholarship",
                "department": "Department of Social Justice",
                "eligibility_criteria": {
                    "min_cgpa": 6,
                    "max_cgpa": 10,
                    "min_attendance": 75,
                    "courses": ["B.Tech CSE"],
                    "semesters": [3, 4, 5, 6]
                },
                "application_end_date": "2026-12-31T23:59:59Z"
            }
        }
    )


class SchemeUpdate(BaseModel):
    """Partial admin update of a scheme"""
    name: Optional[str] = None
    short_name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[SchemeType] = None
    amount: Optional[SchemeAmount] = None
    department: Optional[str] = None
    ministry: Optional[str] = None
    level: Optional[SchemeLevel] = None
    eligibility_criteria: Optional[EligibilityCriteria] = None
    application_start_date: Optional[datetime] = None
    application_end_date: Optional[datetime] = None
    application_process: Optional[Literal['Online', 'Offline', 'Both']] = None
    application_url: Optional[str] = None
    documents_required: Optional[List[RequiredDocument]] = None
    benefits: Optional[List[str]] = None
    terms_and_conditions: Optional[str] = None
    website_url: Optional[str] = None
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None
    category: Optional[SchemeCategory] = None

    @model_validator(mode="after")
    def check_cgpa_bounds(self):
        if self.eligibility_criteria is not None and not self.eligibility_criteria.is_well_formed:
            raise ValueError("min_cgpa must not exceed max_cgpa")
        return self


class EligibilityVerdict(BaseModel):
    """Outcome of checking one student against one scheme"""
    eligible: bool
    reason: str


class ScoreBreakdown(BaseModel):
    """Weighted sub-scores before rounding"""
    cgpa: float
    attendance: float
    course: float
    semester: float

    @property
    def total(self) -> float:
        return self.cgpa + self.attendance + self.course + self.semester


class MatchResult(BaseModel):
    """A scheme paired with the student's match score; never persisted"""
    scheme: Scheme
    match_score: int = Field(..., ge=0, le=100)
