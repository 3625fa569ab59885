"""Auth Service - registration, login and profile lookup that issue tokens verify_token accepts.

Invariants:
    - Tokens are produced ONLY by core.credentials.issue_token with the configured secret
    - Public user dicts never contain password_hash
    - Unknown email and wrong password are indistinguishable to the caller
"""

import logging
from datetime import timedelta

from tasksync.config import Settings
from tasksync.core.credentials import issue_token
from tasksync.core.domain_types import OwnerId
from tasksync.core.errors import (
    EmailTakenError, InvalidCredentialError, ResourceNotFoundError,
    TaskValidationError,
)
from tasksync.core.repository_protocols import UserRepository
from tasksync.infrastructure.password_hashing import (
    PASSWORD_MAX_BYTES, hash_password, verify_password,
)

logger = logging.getLogger(__name__)


def public_user(user: dict) -> dict:
    return {"id": str(user["id"]), "name": user["name"], "email": user["email"]}


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class AuthService:

    def __init__(self, users: UserRepository, settings: Settings):
        self.users = users
        self.settings = settings

    def _token_for(self, user: dict) -> str:
        return issue_token(
            OwnerId(user["id"]),
            self.settings.jwt_secret,
            email=user["email"],
            algorithm=self.settings.jwt_algorithm,
            expires_in=timedelta(days=self.settings.jwt_expires_days),
        )

    async def register(
        self, name: str | None, email: str | None, password: str | None,
    ) -> dict:
        """Create an account and sign it in. Returns {user, token}."""
        email = _normalize_email(email)
        if not email or not password:
            raise TaskValidationError(
                "Email and password required", "email" if not email else "password",
            )
        if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise TaskValidationError(
                f"Password must be at most {PASSWORD_MAX_BYTES} bytes", "password",
            )
        if await self.users.get_by_email(email):
            raise EmailTakenError()
        password_hash = await hash_password(password, self.settings.bcrypt_rounds)
        user = await self.users.create(name, email, password_hash)
        return {"user": public_user(user), "token": self._token_for(user)}

    async def login(self, email: str | None, password: str | None) -> dict:
        email = _normalize_email(email)
        if not email or not password:
            raise TaskValidationError(
                "Email and password required", "email" if not email else "password",
            )
        user = await self.users.get_by_email(email)
        if not user or not await verify_password(password, user["password_hash"]):
            logger.info("Login rejected")
            raise InvalidCredentialError("Invalid credentials", "INVALID_LOGIN")
        return {"user": public_user(user), "token": self._token_for(user)}

    async def get_profile(self, owner_id: OwnerId) -> dict:
        user = await self.users.get_by_id(owner_id)
        if not user:
            raise ResourceNotFoundError("User", str(owner_id))
        return public_user(user)
