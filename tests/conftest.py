import random
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core import models  # noqa: F401
from app.db.session import Base, get_db
from app.ledger.models import FeeStructure, LedgerState, SchoolSettings, Student
from app.ledger.store import LedgerStore
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
def ledger_state() -> LedgerState:
    """Two grades, one student in G1 paying the three term tuitions."""
    school = SchoolSettings(
        academic_year="2024/2025",
        currency="KES",
        grades=["G1", "G2"],
        fee_structures=[
            FeeStructure(grade="G1", fees={"t1": 1000, "t2": 1000, "t3": 1000, "lunch": 400}),
            FeeStructure(grade="G2", fees={"t1": 1100, "t2": 1100, "t3": 1100, "lunch": 450}),
        ],
    )
    student = Student(id="S1", name="Amina Otieno", grade="G1", selected_fees=["t1", "t2", "t3"])
    return LedgerState(settings=school, students=[student])


@pytest.fixture()
def store(ledger_state: LedgerState) -> LedgerStore:
    return LedgerStore(ledger_state, rng=random.Random(7))



@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session on a fresh in-memory DB and override the FastAPI dependency."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, future=True, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
