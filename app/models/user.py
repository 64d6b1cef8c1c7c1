"""
Pydantic models for user accounts and authentication
"""
from typing import Optional, Literal
from pydantic import BaseModel, Field, EmailStr, field_validator


UserRole = Literal['admin', 'student', 'institution']


class UserCreate(BaseModel):
    """Registration payload"""
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class UserUpdate(BaseModel):
    """Admin update of a user's name, role or status"""
    name: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class Token(BaseModel):
    success: bool = True
    message: Optional[str] = None
    token: str
    user_id: str
    role: UserRole
    name: str


class TokenData(BaseModel):
    user_id: Optional[str] = None
    role: Optional[str] = None
