"""
Shared fixtures: an in-memory SQLite database per test and an HTTP
client wired to it.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENV_MODE", "development")

from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bistro.database import Base, get_db
from bistro.main import app
from bistro.models import Category, Order, OrderItem, OrderStatus, OrderType, Product


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def menu(db):
    """Two categories, three products (one unavailable)."""
    mains = Category(name="Main Courses", description="Hearty dishes")
    desserts = Category(name="Desserts")
    steak = Product(name="Ribeye Steak", price=Decimal("32.99"), category=mains)
    salmon = Product(name="Grilled Salmon", price=Decimal("24.99"), category=mains, available=False)
    cake = Product(name="Chocolate Cake", price=Decimal("8.99"), category=desserts)
    db.add_all([mains, desserts, steak, salmon, cake])
    await db.commit()
    return {
        "mains": mains,
        "desserts": desserts,
        "steak": steak,
        "salmon": salmon,
        "cake": cake,
    }


@pytest.fixture
def settings_override(monkeypatch):
    """Patch fields on the cached Settings instance for one test."""
    from bistro.core.config import get_settings

    settings = get_settings()

    def override(**values):
        for key, value in values.items():
            monkeypatch.setattr(settings, key, value)

    return override


def make_order(
    total,
    created_at,
    order_type=OrderType.DINE_IN,
    status=OrderStatus.COMPLETED,
    items=(),
    order_id=None,
):
    """Build a transient Order for aggregation tests.

    items: iterable of (product name, quantity, unit price)
    """
    return Order(
        id=order_id,
        order_type=order_type,
        table_number="1" if order_type == OrderType.DINE_IN else None,
        status=status,
        total=Decimal(str(total)),
        created_at=created_at,
        items=[
            OrderItem(
                quantity=quantity,
                price=Decimal(str(price)),
                product=Product(name=name, price=Decimal(str(price))),
            )
            for name, quantity, price in items
        ],
    )


@pytest.fixture
def order_factory():
    return make_order


@pytest.fixture
def sample_day_orders():
    """Three completed orders on 2024-01-01."""
    return [
        make_order(25.99, datetime(2024, 1, 1, 12, 0), OrderType.DINE_IN,
                   items=[("Steak", 1, 25.99)], order_id=1),
        make_order(18.99, datetime(2024, 1, 1, 18, 0), OrderType.TAKEAWAY,
                   items=[("Burger", 2, 9.50)], order_id=2),
        make_order(12.99, datetime(2024, 1, 1, 20, 0), OrderType.DINE_IN,
                   items=[("Salad", 1, 12.99)], order_id=3),
    ]
