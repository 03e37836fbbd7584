"""Pytest fixtures for bizops tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bizops.api.app import create_app
from bizops.database import init_db
from bizops.models import (
    Base,
    Customer,
    Employee,
    Partner,
    Product,
    ProductCostHistory,
    ShippingCostHistory,
    Supplier,
    Tenant,
)

# In-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_tenant(session: AsyncSession) -> Tenant:
    """Create a test tenant."""
    tenant = Tenant(tenant_id=uuid4(), name="Test Company", status="active")
    session.add(tenant)
    await session.flush()
    return tenant


@pytest_asyncio.fixture
async def other_tenant(session: AsyncSession) -> Tenant:
    """A second tenant whose data must stay invisible to the first."""
    tenant = Tenant(tenant_id=uuid4(), name="Other Company", status="active")
    session.add(tenant)
    await session.flush()
    return tenant


@pytest_asyncio.fixture
async def test_employee(session: AsyncSession, test_tenant: Tenant) -> Employee:
    """Active employee paid $20.00/hour."""
    employee = Employee(
        employee_id=uuid4(),
        tenant_id=test_tenant.tenant_id,
        name="Alice Able",
        employee_code="E001",
        hourly_rate=Decimal("20.00"),
        active=True,
    )
    session.add(employee)
    await session.flush()
    return employee


@pytest_asyncio.fixture
async def second_employee(session: AsyncSession, test_tenant: Tenant) -> Employee:
    employee = Employee(
        employee_id=uuid4(),
        tenant_id=test_tenant.tenant_id,
        name="Bob Baker",
        employee_code="E002",
        hourly_rate=Decimal("18.50"),
        active=True,
    )
    session.add(employee)
    await session.flush()
    return employee


@pytest_asyncio.fixture
async def inactive_employee(session: AsyncSession, test_tenant: Tenant) -> Employee:
    employee = Employee(
        employee_id=uuid4(),
        tenant_id=test_tenant.tenant_id,
        name="Carl Gone",
        employee_code="E003",
        hourly_rate=Decimal("15.00"),
        active=False,
    )
    session.add(employee)
    await session.flush()
    return employee


@pytest_asyncio.fixture
async def test_products(session: AsyncSession, test_tenant: Tenant) -> dict[str, Product]:
    """A regular product with cost history, and the Refund/Discount product."""
    widget = Product(product_id=uuid4(), tenant_id=test_tenant.tenant_id, name="Widget")
    refund = Product(product_id=uuid4(), tenant_id=test_tenant.tenant_id, name="Refund/Discount")
    session.add_all([widget, refund])
    await session.flush()

    session.add_all(
        [
            ProductCostHistory(
                product_id=widget.product_id,
                cost=Decimal("1.00"),
                effective_from=datetime(2024, 1, 1, tzinfo=timezone.utc),
            ),
            # 22:00 on May 31 in New York
            ProductCostHistory(
                product_id=widget.product_id,
                cost=Decimal("1.50"),
                effective_from=datetime(2024, 6, 1, 2, 0, tzinfo=timezone.utc),
            ),
        ]
    )
    await session.flush()
    return {"widget": widget, "refund": refund}


@pytest_asyncio.fixture
async def test_customers(session: AsyncSession, test_tenant: Tenant) -> dict[str, Customer]:
    """A BLV customer with shipping history and a Partner customer."""
    blv = Customer(
        customer_id=uuid4(),
        tenant_id=test_tenant.tenant_id,
        name="Direct Buyer",
        customer_type="BLV",
    )
    partner = Customer(
        customer_id=uuid4(),
        tenant_id=test_tenant.tenant_id,
        name="Partner Shop",
        customer_type="Partner",
    )
    session.add_all([blv, partner])
    await session.flush()

    session.add(
        ShippingCostHistory(
            tenant_id=test_tenant.tenant_id,
            customer_id=blv.customer_id,
            shipping_cost=Decimal("0.35"),
            effective_from=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
    )
    await session.flush()
    return {"blv": blv, "partner": partner}


@pytest_asyncio.fixture
async def test_partner(session: AsyncSession, test_tenant: Tenant) -> Partner:
    partner = Partner(partner_id=uuid4(), tenant_id=test_tenant.tenant_id, name="Reseller Co")
    session.add(partner)
    await session.flush()
    return partner


@pytest_asyncio.fixture
async def test_supplier(session: AsyncSession, test_tenant: Tenant) -> Supplier:
    supplier = Supplier(supplier_id=uuid4(), tenant_id=test_tenant.tenant_id, name="Acme Supply")
    session.add(supplier)
    await session.flush()
    return supplier


@pytest_asyncio.fixture
async def seeded(
    session: AsyncSession,
    test_tenant: Tenant,
    other_tenant: Tenant,
    test_employee: Employee,
    second_employee: Employee,
    inactive_employee: Employee,
    test_products: dict[str, Product],
    test_customers: dict[str, Customer],
    test_partner: Partner,
    test_supplier: Supplier,
) -> dict:
    """Commit every seed record so API requests see them."""
    await session.commit()
    return {
        "tenant": test_tenant,
        "other_tenant": other_tenant,
        "employee": test_employee,
        "second_employee": second_employee,
        "inactive_employee": inactive_employee,
        "products": test_products,
        "customers": test_customers,
        "partner": test_partner,
        "supplier": test_supplier,
    }


@pytest_asyncio.fixture
async def api_client(engine, seeded: dict) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, sending the seeded tenant header."""
    init_db(engine)
    app = create_app()
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Tenant-ID": str(seeded["tenant"].tenant_id)},
    ) as client:
        yield client


@pytest.fixture
def tenant_id(test_tenant: Tenant):
    return test_tenant.tenant_id
