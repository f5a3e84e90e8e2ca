from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.exceptions import AuthenticationException, ValidationException
from catalog_api.core.logging import get_logger
from catalog_api.core.security import Role, get_password_hash, verify_password
from catalog_api.models.user import User

logger = get_logger(__name__)


class UserService:
    """Account storage and password checks."""

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.lower())
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def register_user(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        role: Role = Role.user,
    ) -> User:
        if await self.get_by_email(db, email):
            raise ValidationException("Email already registered")

        user = User(
            email=email.lower(),
            hashed_password=get_password_hash(password),
            full_name=full_name,
            role=role,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ValidationException("Email already registered")
        await db.refresh(user)

        logger.info(f"Registered user: {user.id} ({user.role.value})")
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        user = await self.get_by_email(db, email)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationException("Invalid credentials")
        if not user.is_active:
            raise AuthenticationException("Inactive user")
        return user

    async def ensure_admin(self, db: AsyncSession, email: str, password: str) -> User:
        """Create the bootstrap admin, or promote an existing account with that email."""
        user = await self.get_by_email(db, email)
        if user is None:
            return await self.register_user(db, email, password, full_name="Administrator", role=Role.admin)
        if user.role != Role.admin:
            user.role = Role.admin
            await db.commit()
            logger.info(f"Promoted user to admin: {user.id}")
        return user


user_service = UserService()
