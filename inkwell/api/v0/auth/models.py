import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from inkwell.core.db.tables.user import UserRole
from inkwell.core.text import strip_html


# Deliberately loose: the identity provider owns address verification
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class RegisterRequest(BaseModel):
    email: str = Field(..., max_length=255)
    full_name: str | None = Field(None, max_length=255)
    avatar_url: str | None = Field(None, max_length=512)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid e-mail address")
        return v

    @field_validator("full_name")
    @classmethod
    def sanitize_full_name(cls, v: str | None) -> str | None:
        """Sanitize display name to prevent XSS"""
        if v:
            return strip_html(v) or None
        return v


class VerifyLoginRequest(BaseModel):
    sk: str = Field(..., min_length=16, max_length=256)


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str | None
    avatar_url: str | None
    role: UserRole
    display_name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    sk: str
    user: UserResponse
