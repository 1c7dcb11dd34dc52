# app/core/users.py
"""
FastAPI Users configuration, the per-request Principal and role checks.

Handlers never look at ambient auth state: they receive a Principal built
from the authenticated user and pass it down to the services.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi_users import BaseUserManager, FastAPIUsers, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    CookieTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users.password import PasswordHelper
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.constants import UserRole
from app.db.engine import get_session
from app.models.user import User

logger = logging.getLogger(__name__)

# --- Configuration ---
SECRET = settings.secret_key
if not SECRET:
    raise RuntimeError("FATAL: SECRET_KEY not configured in .env")

ACCESS_TOKEN_COOKIE_NAME = "paytrack_access_token"
ACCESS_TOKEN_LIFETIME_SECONDS = settings.access_token_lifetime_seconds

# --- Authentication Transports ---
# 1. Bearer Token Transport (API access via Authorization header)
bearer_transport = BearerTransport(tokenUrl="auth/jwt/login")

# 2. Cookie Transport (browser sessions)
cookie_transport = CookieTransport(
    cookie_name=ACCESS_TOKEN_COOKIE_NAME,
    cookie_max_age=ACCESS_TOKEN_LIFETIME_SECONDS,
    cookie_httponly=True,
    cookie_secure=settings.is_production,
    cookie_samesite="lax",
)


# --- JWT Strategy ---
def get_jwt_strategy() -> JWTStrategy:
    """Returns JWT strategy for token generation and validation"""
    return JWTStrategy(secret=SECRET, lifetime_seconds=ACCESS_TOKEN_LIFETIME_SECONDS)


auth_backend_jwt = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

auth_backend_cookie = AuthenticationBackend(
    name="cookie",
    transport=cookie_transport,
    get_strategy=get_jwt_strategy,
)


# --- Argon2 Password Helper ---
argon2_context = CryptContext(schemes=["argon2"], deprecated="auto")
password_helper = PasswordHelper(argon2_context)


# --- User Manager ---
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    """User lifecycle hooks."""

    reset_password_token_secret = SECRET
    verification_token_secret = SECRET

    async def on_after_login(
        self, user: User, request: Optional[Request] = None, response=None
    ):
        logger.info(f"🔐 User logged in: {user.email} ({user.role})")

    async def on_after_forgot_password(
        self, user: User, token: str, request: Optional[Request] = None
    ):
        logger.info(f"🔑 Password reset requested for: {user.email}")


async def get_user_db(session: AsyncSession = Depends(get_session)):
    yield SQLAlchemyUserDatabase(session, User)


async def get_user_manager(user_db=Depends(get_user_db)):
    yield UserManager(user_db, password_helper)


# --- FastAPI Users Instance ---
fastapi_users = FastAPIUsers[User, uuid.UUID](
    get_user_manager,
    [auth_backend_jwt, auth_backend_cookie],
)

current_active_user = fastapi_users.current_user(active=True)


# --- Session object ---
@dataclass(frozen=True)
class Principal:
    """The authenticated caller, passed explicitly into every service call."""

    id: uuid.UUID
    email: str
    role: str
    name: str = ""
    terminated: bool = False

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            name=user.name or "",
            terminated=bool(user.terminated),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_subadmin(self) -> bool:
        return self.role == UserRole.SUBADMIN.value

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT.value


def get_principal(user: User = Depends(current_active_user)) -> Principal:
    return Principal.from_user(user)


# --- Role-Based Access Control ---
class RoleChecker:
    """
    Dependency class to check that the caller has one of the allowed roles.

    Usage:
        @router.get("/admin-only")
        def admin_endpoint(principal: Principal = Depends(RoleChecker(["admin"]))):
            ...
    """

    def __init__(self, allowed_roles: list[str]):
        self.allowed_roles = allowed_roles

    def __call__(self, principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join(self.allowed_roles)}. Your role: {principal.role}",
            )
        return principal


require_admin = RoleChecker([UserRole.ADMIN.value])
require_reviewer = RoleChecker([UserRole.ADMIN.value, UserRole.SUBADMIN.value])
require_subadmin = RoleChecker([UserRole.SUBADMIN.value])
require_client = RoleChecker([UserRole.CLIENT.value])
