"""API Dependencies - authentication and service wiring shared by all routes.

Invariants:
    - authenticate() is the single entry to the credential verifier for BOTH the
      HTTP routes and the WebSocket handshake
    - The connection registry comes from app.state, never a module global
    - A TaskService is built per request around that request's DB session
"""

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasksync.config import Settings, get_settings
from tasksync.core.credentials import Credential, decode_credential, extract_bearer_token
from tasksync.core.domain_types import OwnerId
from tasksync.infrastructure.connection_registry import ConnectionRegistry
from tasksync.infrastructure.database import get_db
from tasksync.infrastructure.repositories import SqlTaskRepository, SqlUserRepository
from tasksync.services.auth_service import AuthService
from tasksync.services.broadcast_router import BroadcastRouter
from tasksync.services.task_service import TaskService


def authenticate(token: str | None, settings: Settings) -> Credential:
    """Verify a token with the configured secret. Raises InvalidCredentialError."""
    return decode_credential(token, settings.jwt_secret, settings.jwt_algorithm)


async def get_current_owner(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> OwnerId:
    """Bearer-token guard for request/response routes."""
    return authenticate(extract_bearer_token(authorization), settings).owner_id


def get_connection_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.connection_registry


async def get_task_service(
    db: AsyncSession = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_connection_registry),
) -> TaskService:
    return TaskService(SqlTaskRepository(db), BroadcastRouter(registry))


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(SqlUserRepository(db), settings)
