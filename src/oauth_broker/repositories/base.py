"""Base repository shared by the token and configuration stores."""

import logging
from typing import Generic, TypeVar, Type
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import Base

T = TypeVar('T', bound=Base)
logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Generic repository over one mapped table.

    Repositories only flush; committing or rolling back is left to the
    service that owns the unit of work.
    """

    def __init__(self, model: Type[T], session: AsyncSession):
        self.model = model
        self.session = session

    async def create(self, entity: T) -> T:
        """Add a new entity and flush it."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def delete_by_id(self, id: int) -> int:
        """Delete the row with this primary key; returns the number of rows removed."""
        result = await self.session.execute(
            delete(self.model).where(self.model.id == id)
        )
        return result.rowcount or 0
