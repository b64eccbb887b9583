from fastapi import APIRouter, Depends, Response, status
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from database import get_async_db
from schemas.user import User, SignupRequest, LoginRequest, ProfileUpdateRequest
from services import auth_service
from utils.api_response import success_response

logger = logging.getLogger(__name__)

# Re-export validate_token as get_current_user for convenient importing by other routers
# Usage: from routers.auth import get_current_user
get_current_user = auth_service.validate_token

router = APIRouter()


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user and log them in"
)
async def signup(
    body: SignupRequest,
    response: Response,
    current_user: Optional[User] = Depends(auth_service.get_optional_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Register a new user with:
    - **name**: display name
    - **email**: valid email address, stored lower-cased
    - **password**: at least 6 characters
    - **role**: optional; only an authenticated admin may request `admin`

    Returns the token and public user fields. Anonymous signups also get the
    token as an HTTP-only cookie; an authenticated caller keeps their own.
    """
    auth = await auth_service.register_user(
        db, body.name, body.email, body.password, body.role, requested_by=current_user
    )
    if current_user is None:
        auth_service.set_auth_cookie(response, auth.token)
    return success_response(auth.model_dump(mode="json"), "User registered successfully")


@router.post(
    "/login",
    summary="Login to get a token",
    responses={401: {"description": "Invalid credentials"}}
)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
):
    """Login with email and password. Unknown email and wrong password look the same."""
    auth = await auth_service.login_user(db, body.email, body.password)
    auth_service.set_auth_cookie(response, auth.token)
    return success_response(auth.model_dump(mode="json"), "Login successful")


@router.post("/logout", summary="Logout and clear the token cookie")
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
):
    auth_service.clear_auth_cookie(response)
    logger.info(f"User logged out: {current_user.email}")
    return success_response({}, "Logged out successfully")


@router.get("/me", summary="Get the current user")
async def me(current_user: User = Depends(get_current_user)):
    return success_response(current_user.model_dump(mode="json", by_alias=True), "User retrieved")


@router.put("/profile", summary="Update name, email or password")
async def update_profile(
    body: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Update the current user's profile. Returns a fresh token carrying the
    updated email.
    """
    auth = await auth_service.update_profile(
        db,
        current_user.id,
        name=body.name,
        email=body.email,
        password=body.password,
    )
    logger.info(f"User updated profile: {auth.user.email}")
    return success_response(auth.model_dump(mode="json"), "Profile updated successfully")
