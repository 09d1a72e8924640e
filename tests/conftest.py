"""Shared pytest fixtures for unit and integration tests."""

import os
import uuid
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

# Load .env so DATABASE_URL is available for the requires_db check
try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass

# Every test client shares one remote address; keep the limiter out of the way
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.main import app
from app.config import settings
from app.database import get_db
from app.models.billing import Invoice, Collection
from app.models.enums import InvoiceStatus, SchoolType, ProductTier
from app.models.school import School

# Skip database-backed tests if DATABASE_URL is not set
requires_db = pytest.mark.skipif(
    not os.getenv("DATABASE_URL"),
    reason="DATABASE_URL must be set",
)


def make_school(**overrides) -> School:
    now = datetime(2026, 1, 1, 8, 0, 0)
    values = dict(
        id=uuid.uuid4(),
        name="Kilimani Academy",
        type=SchoolType.PRIMARY,
        product=ProductTier.FINANCE,
        county="Nairobi",
        registration_date=date(2026, 1, 1),
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    values.update(overrides)
    return School(**values)


def make_invoice(amount="1000", paid_amount="0", **overrides) -> Invoice:
    now = datetime(2026, 1, 2, 8, 0, 0)
    amount, paid_amount = Decimal(amount), Decimal(paid_amount)
    balance = amount - paid_amount
    values = dict(
        id=uuid.uuid4(),
        school_id=uuid.uuid4(),
        invoice_number="INV1",
        items=[{"description": "Finance module licence", "quantity": 1, "unit_price": str(amount)}],
        due_date=date(2026, 3, 31),
        amount=amount,
        paid_amount=paid_amount,
        opening_paid_amount=paid_amount,
        balance=balance,
        status=InvoiceStatus.PENDING if balance > 0 else InvoiceStatus.COMPLETED,
        created_at=now,
        updated_at=now,
    )
    values.update(overrides)
    return Invoice(**values)


def make_collection(invoice: Invoice, amount="500", status="Completed", **overrides) -> Collection:
    now = datetime(2026, 1, 3, 8, 0, 0)
    values = dict(
        id=uuid.uuid4(),
        invoice_id=invoice.id,
        school_id=invoice.school_id,
        collection_number=f"COL-{uuid.uuid4().hex[:8]}",
        amount=Decimal(amount),
        status=status,
        created_at=now,
        updated_at=now,
    )
    values.update(overrides)
    return Collection(**values)


@pytest.fixture
def api_base() -> str:
    """Base URL for API requests."""
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
def db() -> AsyncMock:
    """Mocked session for service-level tests."""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
async def mock_client(api_base: str, db: AsyncMock):
    """HTTP client whose requests receive the mocked session instead of a database."""

    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    client = AsyncClient(transport=ASGITransport(app=app), base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def async_client(api_base: str):
    """HTTP client against the real database; tables are created on first use."""
    from app.database import engine, init_db

    await init_db()
    client = AsyncClient(transport=ASGITransport(app=app), base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()
    # Pooled asyncpg connections are bound to this test's event loop
    await engine.dispose()


@pytest.fixture
def unique_suffix() -> str:
    """Unique suffix for test data to avoid collisions."""
    return str(uuid.uuid4())[:8]


@pytest.fixture
async def registered_school(async_client: AsyncClient, api_base: str, unique_suffix: str) -> dict:
    """Register a school and return its JSON representation."""
    resp = await async_client.post(
        f"{api_base}/schools",
        json={
            "name": f"Test School {unique_suffix}",
            "type": "secondary",
            "product": "Finance",
            "county": "Nakuru",
            "contact_email": f"bursar_{unique_suffix}@test.example.com",
            "contact_phone": "+254700000000",
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]
