"""
Auth Service - Authentication flows and request guards.

This service owns:
- Signup/login/profile flows that hand out tokens
- Token extraction from the request (header, then cookie)
- The three guards used as FastAPI dependencies:
    validate_token     mandatory identity
    require_role(...)  role-restricted, runs after validate_token
    get_optional_user  identity if present, never fails

Token signing and verification live in token_service; user persistence lives
in user_service.
"""

from datetime import timedelta
from typing import Callable, Iterable, List, Optional
from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from config.settings import settings
from database import get_async_db
from exceptions import (
    UnauthenticatedError,
    ExpiredTokenError,
    InvalidTokenError,
    UserNotFoundError,
    InvalidCredentialsError,
    AuthorizationError,
    ForbiddenError,
    TokenExpiredError,
    InvalidSignatureError,
)
from models import User as UserModel, UserRole
from schemas.user import User, UserSummary, AuthData
from services.token_service import issue_token, verify_token
from services.user_service import UserService

logger = logging.getLogger(__name__)

TokenExtractor = Callable[[Request], Optional[str]]


# ==================== Token extraction ====================


def extract_bearer_header(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None


def extract_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None


# Tried in order, first non-empty result wins
TOKEN_EXTRACTORS: List[TokenExtractor] = [extract_bearer_header, extract_cookie]


def extract_token(request: Request, extractors: Iterable[TokenExtractor] = TOKEN_EXTRACTORS) -> Optional[str]:
    for extractor in extractors:
        token = extractor(request)
        if token:
            return token
    return None


# ==================== Cookies ====================


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=int(timedelta(days=settings.COOKIE_EXPIRE_DAYS).total_seconds()),
        httponly=True,
        secure=settings.IS_PRODUCTION,
        samesite="strict",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME, httponly=True)


# ==================== Flows ====================


def create_auth_data(user: UserModel) -> AuthData:
    """Issue a fresh token for a user and pair it with the public user fields."""
    token = issue_token(user.id, user.email, user.role.value)
    return AuthData(token=token, user=UserSummary.model_validate(user))


async def register_user(
    db: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.USER,
    requested_by: Optional[User] = None,
) -> AuthData:
    """
    Create an account and issue its token.

    Any role other than user may only be granted by an authenticated admin.

    Raises:
        AuthorizationError: a non-user role was requested without admin rights
    """
    if role != UserRole.USER and (requested_by is None or requested_by.role != UserRole.ADMIN):
        logger.warning(f"Rejected {role.value} signup for {email}: caller is not an admin")
        raise AuthorizationError("Only an admin can create accounts with elevated roles")
    logger.info(f"Registering new user: {email}")
    user = await UserService(db).create_user(name=name, email=email, password=password, role=role)
    return create_auth_data(user)


async def login_user(db: AsyncSession, email: str, password: str) -> AuthData:
    """
    Authenticate user and return a token.

    Raises:
        InvalidCredentialsError: unknown email or wrong password (same message)
    """
    logger.info(f"Login attempt for: {email}")

    user = await UserService(db).verify_credentials(email, password)
    if not user:
        logger.warning(f"Failed login attempt for: {email}")
        raise InvalidCredentialsError()

    logger.info(f"Successful login for: {email}")
    return create_auth_data(user)


async def update_profile(
    db: AsyncSession,
    user_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> AuthData:
    user = await UserService(db).update_profile(user_id, name=name, email=email, password=password)
    return create_auth_data(user)


# ==================== Guards ====================


async def _resolve_user(request: Request, db: AsyncSession) -> User:
    """Verify the request's token and load its user. Raises an AuthenticationError subclass."""
    token = extract_token(request)
    if not token:
        raise UnauthenticatedError()

    try:
        claims = verify_token(token)
    except TokenExpiredError:
        logger.info("Token expired")
        raise ExpiredTokenError()
    except InvalidSignatureError as e:
        logger.warning(f"JWT validation error: {str(e)}")
        raise InvalidTokenError()

    user = await UserService(db).get_user_by_id(claims["sub"])
    if user is None:
        logger.warning(f"Token user not found: {claims['sub']}")
        raise UserNotFoundError()

    return User.model_validate(user)


async def validate_token(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
) -> User:
    """
    Mandatory guard.

    Used as a dependency in routers: Depends(auth_service.validate_token)

    Returns:
        The authenticated user, also stored on request.state.user

    Raises:
        UnauthenticatedError: no token material
        ExpiredTokenError: token past its expiry
        InvalidTokenError: bad signature or malformed token
        UserNotFoundError: valid token whose user no longer exists
    """
    user = await _resolve_user(request, db)
    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
) -> Optional[User]:
    """Optional guard: attaches the user when the token is good, otherwise carries on anonymously."""
    request.state.user = None
    if not extract_token(request):
        return None
    try:
        user = await _resolve_user(request, db)
    except (UnauthenticatedError, ExpiredTokenError, InvalidTokenError, UserNotFoundError) as e:
        logger.debug(f"Optional auth - ignoring credential: {e.message}")
        return None
    request.state.user = user
    return user


def is_role_allowed(role: str, allowed_roles: Iterable[str]) -> bool:
    """Case-sensitive membership test."""
    role_value = role.value if isinstance(role, UserRole) else role
    return role_value in {r.value if isinstance(r, UserRole) else r for r in allowed_roles}


def check_role(request: Request, allowed_roles: Iterable[str]) -> User:
    user: Optional[User] = getattr(request.state, "user", None)
    if user is None:
        raise UnauthenticatedError("Not authorized. Please login first.")
    if not is_role_allowed(user.role, allowed_roles):
        logger.warning(f"Forbidden: role={user.role.value} path={request.url.path}")
        raise ForbiddenError(user.role.value, request.url.path)
    return user


def require_role(*allowed_roles: str):
    """
    Role-restricted guard factory.

    Usage:
        @router.get("/users", dependencies=[Depends(require_role("admin"))])
    """
    allowed = tuple(allowed_roles)

    async def role_guard(request: Request, _user: User = Depends(validate_token)) -> User:
        return check_role(request, allowed)

    return role_guard
