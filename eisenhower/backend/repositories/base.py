"""
Base Repository.

Write helpers shared by the user and note repositories. Reads are
owner- or key-scoped and live on the subclasses.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from eisenhower.backend.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Subclasses set the model class:

        class UserRepository(BaseRepository[User]):
            model = User

    Every write is flushed, never committed; the request's session
    dependency owns the transaction.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, **kwargs: Any) -> ModelType:
        """Insert a record and reload it, so server defaults are populated."""
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update_instance(self, instance: ModelType, **kwargs: Any) -> ModelType:
        """Apply field changes to an already loaded record. Unknown names are ignored."""
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete_instance(self, instance: ModelType) -> None:
        await self.session.delete(instance)
        await self.session.flush()
