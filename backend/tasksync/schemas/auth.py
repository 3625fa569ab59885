"""Auth Schemas - register/login bodies and the public user shape.

Invariants:
    - UserResponse has no password field
    - Missing email/password reach AuthService, which answers with one structured 400
"""

from uuid import UUID

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str | None = Field(None, max_length=200)
    email: str | None = Field(None, max_length=320)
    password: str | None = Field(None, max_length=72)


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = Field(None, max_length=72)


class UserResponse(BaseModel):
    id: UUID
    name: str | None = None
    email: str


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
