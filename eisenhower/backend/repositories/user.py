"""
User Repository.

Data access for the credential store.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eisenhower.backend.models.user import User
from eisenhower.backend.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    model = User

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_by_nickname(self, nickname: str) -> User | None:
        """Get a user by login nickname."""
        result = await self.session.execute(
            select(User).where(User.nickname == nickname)
        )
        return result.scalar_one_or_none()

    async def exists_by_nickname(self, nickname: str) -> bool:
        """Check whether a nickname is already taken."""
        result = await self.session.execute(
            select(User.id).where(User.nickname == nickname)
        )
        return result.scalar_one_or_none() is not None

    async def get_by_refresh_token(self, refresh_token: str) -> User | None:
        """Get the user currently holding the given refresh token."""
        result = await self.session.execute(
            select(User).where(User.refresh_token == refresh_token)
        )
        return result.scalar_one_or_none()

    async def set_refresh_token(self, user: User, refresh_token: str) -> User:
        """Store a refresh token, replacing whatever the user held before."""
        return await self.update_instance(user, refresh_token=refresh_token)

    async def clear_refresh_token(self, refresh_token: str) -> int:
        """
        Clear the refresh token wherever it is stored.

        Returns:
            Number of users affected (0 or 1)
        """
        result = await self.session.execute(
            update(User)
            .where(User.refresh_token == refresh_token)
            .values(refresh_token=None)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def lock(self, user_id: str) -> None:
        """
        Take a row lock on the user until the transaction ends.

        Serializes check-then-act sequences for one owner on databases
        that support FOR UPDATE; SQLite ignores the clause.
        """
        await self.session.execute(
            select(User.id).where(User.id == user_id).with_for_update()
        )
