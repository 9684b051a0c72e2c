from pydantic import BaseModel, EmailStr, Field, AliasChoices, validator
from typing import Optional
from ..utils.validation import ValidationHelpers
from .user import UserResponse


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    password: str = Field(..., min_length=1)

    @validator("username")
    def validate_username(cls, v):
        v = v.strip()
        if not ValidationHelpers.validate_username(v):
            raise ValueError("Username must be alphanumeric")
        return v

    @validator("phone")
    def validate_phone(cls, v):
        if v is not None and not ValidationHelpers.validate_phone(v.strip()):
            raise ValueError("Phone must be in E.164 format, e.g. +15550101234")
        return v.strip() if v is not None else v

    @validator("password")
    def validate_password(cls, v):
        problems = ValidationHelpers.password_problems(v)
        if problems:
            raise ValueError(f"Password must {', '.join(problems)}")
        return v


class LoginRequest(BaseModel):
    identifier: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("identifier", "email", "username", "phone"),
        description="Email, username or phone",
    )
    password: str


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"
