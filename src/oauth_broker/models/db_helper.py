import inspect
from asyncio import current_task
from typing import Any, AsyncIterator, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, async_scoped_session

from ..config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    # Liveness checks only for server-backed pools
    if make_url(url).get_backend_name() == "sqlite":
        return {}
    return {"pool_pre_ping": True, "pool_recycle": 1800}


class DatabaseHelper:
    """Owns the engine and session factory for the token and config tables.

    Built once at import time. Sessions never expire loaded rows on commit,
    so services can keep using a token after committing a cleanup.
    """

    def __init__(self, url: str, echo: bool = False):
        self.engine = create_async_engine(
            url=url,
            echo=echo,
            **_engine_options(url),
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    async def scoped_session_dependency(self) -> AsyncIterator[AsyncSession]:
        """One session per request task, closed when the response is done."""
        scoped_session = self.get_scoped_session()
        session = scoped_session()
        try:
            yield session
        finally:
            await session.close()
            remove_result = scoped_session.remove()
            if inspect.isawaitable(remove_result):
                await remove_result

    def get_scoped_session(self):
        return async_scoped_session(
            session_factory=self.session_factory,
            scopefunc=current_task,
        )

    async def dispose(self) -> None:
        await self.engine.dispose()


db_helper = DatabaseHelper(
    url=settings.db.url,
    echo=settings.db.echo,
)
