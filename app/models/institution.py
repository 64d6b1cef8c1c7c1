"""
Pydantic models for institutions
"""
from typing import Optional, Literal
from pydantic import BaseModel, Field


InstitutionType = Literal['Government', 'Private', 'Deemed', 'Autonomous']


class InstitutionCreate(BaseModel):
    name: str = Field(..., min_length=1)
    short_name: Optional[str] = None
    aishe_code: str = Field(..., min_length=1, description="All India Survey on Higher Education code")
    location: str = Field(..., min_length=1)
    type: InstitutionType = 'Private'
    accreditation: str = 'NAAC A'
    nirf_score: float = Field(default=0, ge=0, le=100)
    ranking: int = 0
    compliance: float = Field(default=0, ge=0, le=100)
    students: int = Field(default=0, ge=0)
    faculty: int = Field(default=0, ge=0)
    departments: int = Field(default=0, ge=0)
    projects: int = Field(default=0, ge=0)
    established: Optional[int] = None
    placement: float = Field(default=0, ge=0, le=100)
    website: Optional[str] = None
    user_id: Optional[str] = None


class InstitutionUpdate(BaseModel):
    name: Optional[str] = None
    short_name: Optional[str] = None
    location: Optional[str] = None
    type: Optional[InstitutionType] = None
    accreditation: Optional[str] = None
    nirf_score: Optional[float] = Field(default=None, ge=0, le=100)
    ranking: Optional[int] = None
    compliance: Optional[float] = Field(default=None, ge=0, le=100)
    students: Optional[int] = Field(default=None, ge=0)
    faculty: Optional[int] = Field(default=None, ge=0)
    departments: Optional[int] = Field(default=None, ge=0)
    projects: Optional[int] = Field(default=None, ge=0)
    established: Optional[int] = None
    placement: Optional[float] = Field(default=None, ge=0, le=100)
    website: Optional[str] = None
    is_active: Optional[bool] = None
