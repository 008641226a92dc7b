from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator


class AuthResponse(BaseModel):
    ok: bool


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("Password must be at least 8 characters")
        return value
