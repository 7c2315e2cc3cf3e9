from __future__ import annotations

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=254)
    password: str | None = Field(default=None, max_length=200)


class LoginRequest(BaseModel):
    email: str | None = Field(default=None, max_length=254)
    password: str | None = Field(default=None, max_length=200)


class UserSummary(BaseModel):
    id: str
    username: str
    email: str


class AuthResponse(BaseModel):
    message: str
    user: UserSummary


class MessageResponse(BaseModel):
    message: str
