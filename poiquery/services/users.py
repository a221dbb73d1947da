"""User accounts: registration, login, profile and role lookups.

Role checks always go back to the users table. The role claim carried
in a bearer token is informational and is never used to authorize a
privileged POI operation.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from poiquery.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    UnauthenticatedException,
    ValidationException,
)
from poiquery.core.security import create_access_token, hash_password, verify_password
from poiquery.models.base import utcnow
from poiquery.models.user import User, UserRole
from poiquery.schemas.auth import RegisterRequest

logger = logging.getLogger(__name__)


class UserService:
    """Account operations bound to one database session."""

    def __init__(self, session) -> None:
        self.session = session

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token({"sub": user.id, "role": user.role})

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register(self, data: RegisterRequest) -> Tuple[User, str]:
        """Create an account and issue its first token.

        Args:
            data: Validated registration body.

        Returns:
            Tuple of (user, bearer token).

        Raises:
            ValidationException: If the email is already registered.
        """
        if await self.get_by_email(data.email) is not None:
            raise ValidationException("Email already registered")

        user = User(
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role.value,
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ValidationException("Email already registered")
        await self.session.refresh(user)

        logger.info(f"Registered user {user.id} with role {user.role}")
        return user, self.issue_token(user)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """Check credentials, refresh last_login and issue a token.

        Raises:
            UnauthenticatedException: If the email or password is wrong.
        """
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Login failed for a supplied email")
            raise UnauthenticatedException("Invalid email or password")

        user.last_login = utcnow()
        await self.session.commit()
        await self.session.refresh(user)

        logger.info(f"User {user.id} logged in")
        return user, self.issue_token(user)

    async def get_profile(self, user_id: str) -> User:
        user = await self.session.get(User, user_id, populate_existing=True)
        if user is None:
            raise NotFoundException("User not found")
        return user

    async def has_role(self, user_id: str, role: UserRole) -> bool:
        """Look the user up again and compare its stored role.

        Returns:
            False for unknown users as well as for a different role.
        """
        user = await self.session.get(User, user_id, populate_existing=True)
        if user is None:
            return False
        return user.role == role.value

    async def require_admin(self, user_id: str) -> None:
        """
        Raises:
            ForbiddenException: If the caller is not a stored admin.
        """
        if not await self.has_role(user_id, UserRole.ADMIN):
            logger.warning(f"Authorization failed: user {user_id} is not an admin")
            raise ForbiddenException()
