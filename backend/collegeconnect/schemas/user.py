"""
Schémas Pydantic pour l'inscription, la connexion et les profils utilisateurs.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, field_validator

from collegeconnect.schemas.common import CamelModel, CamelRequest

VALID_ROLES = {"student", "faculty"}


def _encodable(password: str) -> str:
    # Caractères isolés (ex. "\ud800") acceptés par JSON mais pas par le hachage
    try:
        password.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError("Password contains invalid characters")
    return password


class UserCreate(CamelRequest):
    """Corps de requête POST /api/auth/register."""
    email: EmailStr
    password: str
    first_name: str
    last_name: str
    role: str  # student, faculty
    college_id: str
    department: str
    year: Optional[str] = None
    position: Optional[str] = None
    profile_picture: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return _encodable(v)

    @field_validator("first_name", "last_name")
    @classmethod
    def name_min_length(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v.strip()

    @field_validator("college_id")
    @classmethod
    def college_id_min_length(cls, v: str) -> str:
        if len(v.strip()) < 3:
            raise ValueError("College ID is required")
        return v.strip()

    @field_validator("department")
    @classmethod
    def department_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Department is required")
        return v.strip()

    @field_validator("role")
    @classmethod
    def valid_role(cls, v: str) -> str:
        if v not in VALID_ROLES:
            raise ValueError(f"Invalid role. Accepted values: {sorted(VALID_ROLES)}")
        return v


class LoginRequest(CamelRequest):
    email: str
    password: str

    @field_validator("password")
    @classmethod
    def password_encodable(cls, v: str) -> str:
        return _encodable(v)


class UserResponse(CamelModel):
    """Profil renvoyé au client — sans password_hash."""
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    college_id: str
    department: str
    year: Optional[str]
    position: Optional[str]
    profile_picture: Optional[str]
    created_at: Optional[datetime] = None


class UserEnvelope(CamelModel):
    user: UserResponse


class UsersEnvelope(CamelModel):
    users: List[UserResponse]


class LoginResponse(CamelModel):
    user: UserResponse
    access_token: str  # JWT à envoyer en "Authorization: Bearer <token>"
    token_type: str = "bearer"


class LogoutResponse(CamelModel):
    success: bool
