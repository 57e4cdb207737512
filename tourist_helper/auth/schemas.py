from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Literal
from datetime import datetime

from tourist_helper.schemas import CamelModel

SignupRole = Literal["tourist", "seller", "guide"]

class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: SignupRole = "tourist"
    captcha_token: Optional[str] = None

    # Seller fields
    agency_name: Optional[str] = None
    license: Optional[str] = None
    # Seller and guide
    location: Optional[str] = None
    # Guide fields
    languages: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

class LoginRequest(CamelModel):
    email: str
    password: str
    captcha_token: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

class UserOut(CamelModel):
    """Account as returned to clients; never carries the password hash"""
    id: Optional[int] = None
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    status: str = "active"
    agency_name: Optional[str] = None
    license: Optional[str] = None
    location: Optional[str] = None
    languages: Optional[str] = None
    experience: Optional[int] = None
    approved: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class AuthResponse(BaseModel):
    message: str
    user: UserOut
    token: str

class CurrentUser(BaseModel):
    """Authenticated caller resolved from a bearer token"""
    id: Optional[int] = None
    email: str
    name: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
