"""
Profile Model
Staff accounts and their coarse role
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator
from beanie import Document, Indexed
from enum import Enum


class UserRole(str, Enum):
    """Application role"""
    ADMIN = "admin"
    EMPLOYEE = "employee"
    MANAGER = "manager"


# Roles allowed into the admin suite
STAFF_ROLES = {UserRole.ADMIN, UserRole.MANAGER}


def normalize_email(email: str) -> str:
    """Emails are matched case-insensitively"""
    return email.strip().lower()


class Profile(Document):
    """Profile document model"""

    email: Indexed(str, unique=True)
    name: Optional[str] = None
    department: Optional[str] = None
    role: UserRole = UserRole.EMPLOYEE

    # Authentication
    password_hash: str
    is_active: bool = True

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None

    class Settings:
        name = "profiles"
        indexes = [
            "role",
        ]

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return normalize_email(value)

    @property
    def display_name(self) -> str:
        return self.name or self.email


class ProfileCreate(BaseModel):
    """Schema for self-registration"""
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Optional[str] = None
    department: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return normalize_email(value)


class ProfileResponse(BaseModel):
    """Public view of a profile"""
    id: str
    email: EmailStr
    name: Optional[str] = None
    department: Optional[str] = None
    role: UserRole

    @classmethod
    def from_document(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            id=str(profile.id),
            email=profile.email,
            name=profile.name,
            department=profile.department,
            role=profile.role,
        )
