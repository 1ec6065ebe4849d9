"""Account models: login/registration forms and user payloads."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str | None = None


class User(BaseModel):
    id: str
    username: str
    first_name: str
    last_name: str
    email: str | None = None
    is_active: bool
    created_at: str
    updated_at: str


class RegisteredUser(BaseModel):
    id: str


class LoginPayload(BaseModel):
    user: User


class RegisterPayload(BaseModel):
    user: RegisteredUser


class MePayload(BaseModel):
    user: User
