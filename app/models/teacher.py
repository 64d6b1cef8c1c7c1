"""
Pydantic models for teachers
"""
from typing import List, Optional, Literal
from pydantic import BaseModel, Field, EmailStr, field_validator


Designation = Literal['Professor', 'Associate Professor', 'Assistant Professor', 'Lecturer']


class TeacherCreate(BaseModel):
    name: str = Field(..., min_length=1)
    apar_id: Optional[str] = None
    email: EmailStr
    department: str = Field(..., min_length=1)
    designation: Designation = 'Assistant Professor'
    publications: int = Field(default=0, ge=0)
    projects: int = Field(default=0, ge=0)
    h_index: int = Field(default=0, ge=0)
    experience: int = Field(default=0, ge=0)
    rating: float = Field(default=0, ge=0, le=5)
    specializations: List[str] = Field(default_factory=list)
    institution_id: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip()


class TeacherUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    designation: Optional[Designation] = None
    publications: Optional[int] = Field(default=None, ge=0)
    projects: Optional[int] = Field(default=None, ge=0)
    h_index: Optional[int] = Field(default=None, ge=0)
    experience: Optional[int] = Field(default=None, ge=0)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    specializations: Optional[List[str]] = None
    institution_id: Optional[str] = None
    is_active: Optional[bool] = None
