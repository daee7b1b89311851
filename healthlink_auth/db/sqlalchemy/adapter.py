"""SQLAlchemy user directory."""

from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from healthlink_auth.db.protocols import HealthLinkUserProtocol


UserType = TypeVar("UserType", bound=HealthLinkUserProtocol)


class SQLAlchemyUserDirectory(Generic[UserType]):
    """
    SQLAlchemy implementation of the UserDirectory protocol.

    Wraps an AsyncSession. Emails are matched case-insensitively and inactive
    accounts are reported as missing.

    Example:
        ```python
        from sqlalchemy.ext.asyncio import AsyncSession
        from fastapi import Depends

        async def get_user_directory(
            session: AsyncSession = Depends(get_async_session)
        ) -> SQLAlchemyUserDirectory[User]:
            return SQLAlchemyUserDirectory(session, User)
        ```
    """

    def __init__(self, session: AsyncSession, user_model: type[UserType]) -> None:
        """
        Initialize the directory.

        Args:
            session: SQLAlchemy async session
            user_model: User model class inheriting from BaseHealthLinkUserTable
        """
        self.session = session
        self.user_model = user_model

    async def get_by_email(self, email: str) -> UserType | None:
        """
        Retrieve an active user by email address.

        Args:
            email: Email address to search for

        Returns:
            User object if found and active, None otherwise
        """
        statement = select(self.user_model).where(
            func.lower(self.user_model.email) == email.lower(),  # type: ignore[arg-type]
            self.user_model.is_active.is_(True),  # type: ignore[attr-defined]
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def mark_email_verified(self, user: UserType) -> None:
        """
        Flag the user's email as verified.

        Args:
            user: User object to update
        """
        user.is_email_verified = True
        await self.session.commit()
        await self.session.refresh(user)
