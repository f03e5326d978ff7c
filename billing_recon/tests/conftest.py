"""
Centralized Test Configuration.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

import pytest
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from billing_recon.app.db.session import Base
from billing_recon.app.db.store import StoreAdapter
from billing_recon.app.models.account import Account
from billing_recon.app.models.ledger_entry import LedgerEntry
from billing_recon.app.models.ledger_enums import LedgerEntryType

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)).lower():
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    yield
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def store():
    return StoreAdapter(TestingSessionLocal)


@pytest.fixture
def create_account():
    """Insert an account with the given entries (spaced a minute apart unless timestamps are given)."""
    async def _create(
        username: str,
        balance: int,
        amounts: Sequence[int] = (),
        created_at: Optional[Sequence[datetime]] = None,
    ) -> int:
        async with TestingSessionLocal() as db:
            account = Account(username=username, credits=balance)
            db.add(account)
            await db.flush()
            
            for i, amount in enumerate(amounts):
                db.add(LedgerEntry(
                    account_id=account.id,
                    amount=amount,
                    type=LedgerEntryType.ADDITION.value if amount >= 0 else LedgerEntryType.DEDUCTION.value,
                    description=f"seed entry {i}",
                    created_at=created_at[i] if created_at else BASE_TIME + timedelta(minutes=i),
                ))
            await db.commit()
            return account.id
    return _create


@pytest.fixture
def ledger_sum_of():
    async def _sum(account_id: int) -> int:
        async with TestingSessionLocal() as db:
            result = await db.execute(
                select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(LedgerEntry.account_id == account_id)
            )
            return int(result.scalar_one())
    return _sum


@pytest.fixture
def balance_of():
    async def _balance(account_id: int) -> int:
        async with TestingSessionLocal() as db:
            return (await db.get(Account, account_id)).credits
    return _balance


@pytest.fixture
def count_entries():
    async def _count(entry_type: Optional[str] = None) -> int:
        async with TestingSessionLocal() as db:
            stmt = select(func.count(LedgerEntry.id))
            if entry_type:
                stmt = stmt.where(LedgerEntry.type == entry_type)
            return (await db.execute(stmt)).scalar_one()
    return _count
