"""Auth Routes - register, login and current-user lookup.

Invariants:
    - register/login return {user, token}; token is accepted by both channels
    - GET /me never returns password material
"""

from fastapi import APIRouter, Depends

from tasksync.api.dependencies import get_auth_service, get_current_owner
from tasksync.core.domain_types import OwnerId
from tasksync.schemas.auth import (
    AuthResponse, LoginRequest, RegisterRequest, UserResponse,
)
from tasksync.services.auth_service import AuthService

router = APIRouter(prefix="/api/v1", tags=["auth"])


@router.post("/register", response_model=AuthResponse)
async def register(
    body: RegisterRequest, service: AuthService = Depends(get_auth_service),
):
    return await service.register(body.name, body.email, body.password)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest, service: AuthService = Depends(get_auth_service),
):
    return await service.login(body.email, body.password)


@router.get("/me", response_model=UserResponse)
async def me(
    owner_id: OwnerId = Depends(get_current_owner),
    service: AuthService = Depends(get_auth_service),
):
    return await service.get_profile(owner_id)
