"""
User Service - Single source of truth for all user operations.

This service owns:
- User creation and profile updates
- Password hashing (exactly once per save, only when a new password is given)
- Credential checks for login
- User queries and listing

Tokens and request guards are handled by auth_service.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from typing import Optional, List, Tuple
from fastapi import Depends
from passlib.context import CryptContext
import logging

from models import User as UserModel, UserRole
from config.settings import settings
from database import get_async_db
from exceptions import DuplicateError, ValidationError, NotFoundError

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def _check_password_length(password: str) -> None:
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        message = f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        raise ValidationError(message, details=[{"field": "password", "message": message}])


class UserService:
    """Service for user management operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: str) -> Optional[UserModel]:
        """Get user by ID. Returns None if not found."""
        result = await self.db.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        return result.scalars().first()

    async def get_user_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.db.execute(
            select(UserModel).where(UserModel.email == email.strip().lower())
        )
        return result.scalars().first()

    async def list_users(self, limit: int = 100, offset: int = 0) -> Tuple[List[UserModel], int]:
        count_result = await self.db.execute(select(func.count(UserModel.id)))
        total = count_result.scalar() or 0

        result = await self.db.execute(
            select(UserModel).order_by(UserModel.created_at.desc()).offset(offset).limit(limit)
        )
        return list(result.scalars().all()), total

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> UserModel:
        """Create a new user. The password is hashed here and nowhere else on create."""
        _check_password_length(password)
        email = email.strip().lower()

        if await self.get_user_by_email(email):
            raise DuplicateError("Email already exists. Please use a different email.")

        user = UserModel(
            name=name.strip(),
            email=email,
            password=get_password_hash(password),
            role=role,
        )
        self.db.add(user)
        await self._commit_unique()
        await self.db.refresh(user)

        logger.info(f"Created user: {email} (id={user.id})")
        return user

    async def update_profile(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> UserModel:
        """
        Update name, email and/or password.

        The password is re-hashed only when a new plaintext is supplied and it
        differs from the stored one; other edits never touch the hash.
        """
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        if name:
            user.name = name.strip()

        if email:
            email = email.strip().lower()
            if email != user.email:
                if await self.get_user_by_email(email):
                    raise DuplicateError("Email already in use")
                user.email = email

        if password:
            _check_password_length(password)
            if not verify_password(password, user.password):
                user.password = get_password_hash(password)

        await self._commit_unique()
        await self.db.refresh(user)

        logger.info(f"Updated profile for user {user_id}")
        return user

    async def verify_credentials(self, email: str, password: str) -> Optional[UserModel]:
        """Return the user when email and password match, else None."""
        user = await self.get_user_by_email(email)
        if not user:
            return None

        if not verify_password(password, user.password):
            return None

        return user

    async def _commit_unique(self) -> None:
        # Two concurrent signups can both pass the pre-check
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateError("Email already exists")


async def get_user_service(
    db: AsyncSession = Depends(get_async_db)
) -> UserService:
    """Get a UserService instance with async database session."""
    return UserService(db)
