"""
Store adapter used by the reconciliation engines.

Wraps an async session factory with two entry points: one-shot
parameterized queries and scoped transactions. Every SQLAlchemy error that
crosses this boundary is re-raised as StoreFaultError.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, TypeVar, Union

from sqlalchemy import text
from sqlalchemy.engine import CursorResult, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import Executable

from billing_recon.app.core.exceptions import StoreFaultError
from billing_recon.app.core.observability import logger
from billing_recon.app.db.session import AsyncSessionLocal

T = TypeVar("T")


class StoreAdapter:
    """
    Thin contract over the relational store.
    
    query(): executes a statement in its own short-lived session.
    transaction(): yields a session that commits on success and rolls back
    and re-raises on any error.
    """

    def __init__(self, session_factory: async_sessionmaker = AsyncSessionLocal):
        self.session_factory = session_factory

    async def query(
        self,
        statement: Union[str, Executable],
        params: Optional[Dict[str, Any]] = None
    ) -> list[RowMapping]:
        """
        Execute a parameterized statement and return its rows.
        
        Args:
            statement: Raw SQL (bound with :name placeholders) or a SQLAlchemy statement
            params: Bind parameters
            
        Returns:
            Rows as mappings keyed by column label (empty for statements without rows)
        """
        if isinstance(statement, str):
            statement = text(statement)
        
        try:
            async with self.session_factory() as session:
                result = await session.execute(statement, params or {})
                # DML returns a row-less CursorResult
                if isinstance(result, CursorResult) and not result.returns_rows:
                    rows = []
                else:
                    rows = list(result.mappings().all())
                await session.commit()
                return rows
        except SQLAlchemyError as e:
            logger.error("Store query failed", extra={"error": str(e)})
            raise StoreFaultError(f"Store query failed: {e}") from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Scoped transactional session (commit on exit, rollback on error)."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            logger.error("Store transaction rolled back", extra={"error": str(e)})
            raise StoreFaultError(f"Transaction aborted: {e}") from e

    async def run_in_transaction(self, body: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run ``body(session)`` inside transaction() and return its result."""
        async with self.transaction() as session:
            return await body(session)
