"""Request bodies.

Field names match the JSON the frontend sends (camelCase).
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


_PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])")
PASSWORD_RULE_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, and one number"
)


def _check_password(v: str) -> str:
    if len(v) < 6:
        raise ValueError("Password must be at least 6 characters long")
    if len(v) > 128:
        raise ValueError("Password cannot exceed 128 characters")
    if not _PASSWORD_RULE.match(v):
        raise ValueError(PASSWORD_RULE_MESSAGE)
    return v


def _strip(v: Optional[str]) -> Optional[str]:
    return v.strip() if isinstance(v, str) else v


# -----------------------------
# Auth
# -----------------------------


class RegisterRequest(BaseModel):
    firstName: str = Field(..., min_length=1, max_length=50)
    lastName: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phoneNumber: Optional[str] = Field(None, max_length=20)
    password: str
    confirmPassword: str

    @field_validator("firstName", "lastName", "phoneNumber", mode="before")
    @classmethod
    def _names(cls, v: Optional[str]) -> Optional[str]:
        return _strip(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirmPassword:
            raise ValueError("Confirm password must match password")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    firstName: Optional[str] = Field(None, min_length=1, max_length=50)
    lastName: Optional[str] = Field(None, min_length=1, max_length=50)
    phoneNumber: Optional[str] = Field(None, max_length=20)


class ChangePasswordRequest(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    newPassword: str
    confirmNewPassword: str

    @field_validator("newPassword")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def _passwords_match(self) -> "ChangePasswordRequest":
        if self.newPassword != self.confirmNewPassword:
            raise ValueError("Confirm password must match new password")
        return self


# -----------------------------
# Users (admin)
# -----------------------------


class UserUpdateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    firstName: Optional[str] = Field(None, min_length=1, max_length=50)
    lastName: Optional[str] = Field(None, min_length=1, max_length=50)
    role: Optional[str] = Field(None, pattern="^(user|admin)$")
    isActive: Optional[bool] = None


# -----------------------------
# Categories
# -----------------------------


class CategoryCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = None


class CategoryUpdateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = None
    isActive: Optional[bool] = None


# -----------------------------
# Decors
# -----------------------------


class StockUpdateRequest(BaseModel):
    stock: int = Field(..., ge=0)
