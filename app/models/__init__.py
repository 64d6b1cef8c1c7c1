"""
Models package for the Student Information System backend
"""

from .scheme import (
    Scheme,
    SchemeCreate,
    SchemeUpdate,
    EligibilityCriteria,
    EligibilityVerdict,
    ScoreBreakdown,
    MatchResult
)

from .student import (
    StudentCreate,
    StudentUpdate,
    StudentProfile,
    LifecycleStage,
    LifecycleStageUpdate,
    BulkDeleteRequest
)

from .teacher import TeacherCreate, TeacherUpdate
from .institution import InstitutionCreate, InstitutionUpdate

from .user import (
    UserCreate,
    UserLogin,
    UserUpdate,
    Token,
    TokenData
)

__all__ = [
    # Scheme models
    "Scheme",
    "SchemeCreate",
    "SchemeUpdate",
    "EligibilityCriteria",
    "EligibilityVerdict",
    "ScoreBreakdown",
    "MatchResult",

    # Student models
    "StudentCreate",
    "StudentUpdate",
    "StudentProfile",
    "LifecycleStage",
    "LifecycleStageUpdate",
    "BulkDeleteRequest",

    # Teacher and institution models
    "TeacherCreate",
    "TeacherUpdate",
    "InstitutionCreate",
    "InstitutionUpdate",

    # User models
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "Token",
    "TokenData"
]
