"""Tests for employees, customers, products, partners and suppliers."""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from bizops.calculators.cost_history import CostHistoryResolver
from bizops.errors import NotFoundError, ValidationError
from bizops.services.directory import DirectoryService, EmployeeInput, next_employee_code


@pytest.fixture
def service(session):
    return DirectoryService(session)


class TestNextEmployeeCode:
    """Test EMP### code allocation."""

    def test_first_code(self):
        assert next_employee_code([]) == "EMP001"

    def test_after_highest(self):
        assert next_employee_code(["EMP002", None, "EMP010", "E999", "EMPX"]) == "EMP011"

    def test_grows_past_three_digits(self):
        assert next_employee_code(["EMP999"]) == "EMP1000"


class TestEmployees:
    """Test employee create, update and deactivate."""

    @pytest.mark.asyncio
    async def test_create_assigns_code(self, service, tenant_id, test_employee):
        employee, created = await service.save_employee(
            tenant_id, EmployeeInput(name="  Dana Day ", hourly_rate="22.50")
        )

        assert created is True
        assert employee.name == "Dana Day"
        assert employee.employee_code == "EMP001"
        assert employee.hourly_rate == Decimal("22.50")
        assert employee.active is True

        second, _ = await service.save_employee(tenant_id, EmployeeInput(name="Eve"))
        assert second.employee_code == "EMP002"
        assert second.hourly_rate == Decimal("0")

    @pytest.mark.asyncio
    async def test_update_only_sent_fields(self, service, tenant_id, test_employee):
        employee, created = await service.save_employee(
            tenant_id,
            EmployeeInput(hourly_rate="25"),
            employee_id=test_employee.employee_id,
        )

        assert created is False
        assert employee.hourly_rate == Decimal("25")
        assert employee.name == "Alice Able"
        assert employee.employee_code == "E001"

    @pytest.mark.asyncio
    async def test_rejects_bad_input(self, service, tenant_id, test_employee, caplog):
        caplog.set_level(logging.INFO, logger="bizops.services.directory")

        with pytest.raises(ValidationError) as exc_info:
            await service.save_employee(tenant_id, EmployeeInput(name=" "))
        assert exc_info.value.field == "name"

        with pytest.raises(ValidationError) as exc_info:
            await service.save_employee(tenant_id, EmployeeInput(name="Neg", hourly_rate="-1"))
        assert exc_info.value.field == "hourly_rate"

        with pytest.raises(ValidationError) as exc_info:
            await service.save_employee(
                tenant_id, EmployeeInput(name="Dup", employee_code="E001")
            )
        assert exc_info.value.field == "employee_code"

        assert "Record rejected: name is required" in caplog.text

    @pytest.mark.asyncio
    async def test_deactivate_is_soft(self, service, tenant_id, test_employee, second_employee):
        await service.deactivate_employee(tenant_id, test_employee.employee_id)

        active = await service.list_employees(tenant_id, active=True)
        everyone = await service.list_employees(tenant_id)
        assert [e.name for e in active] == ["Bob Baker"]
        assert [e.name for e in everyone] == ["Bob Baker", "Alice Able"]

    @pytest.mark.asyncio
    async def test_other_tenant_not_found(self, service, other_tenant, test_employee):
        with pytest.raises(NotFoundError):
            await service.deactivate_employee(other_tenant.tenant_id, test_employee.employee_id)
        assert await service.list_employees(other_tenant.tenant_id) == []


class TestCatalog:
    """Test customers, products and cost history."""

    @pytest.mark.asyncio
    async def test_customer_with_shipping_cost(self, session, service, tenant_id):
        customer = await service.create_customer(
            tenant_id,
            "Corner Store",
            "Partner",
            "0.40",
            effective_from=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        assert customer.is_partner

        resolver = CostHistoryResolver(session, "America/New_York")
        shipping = await resolver.shipping_cost(tenant_id, customer.customer_id, date(2024, 3, 15))
        assert shipping == Decimal("0.40")

    @pytest.mark.asyncio
    async def test_customer_search(self, service, tenant_id, test_customers):
        found = await service.list_customers(tenant_id, q="direct")
        assert [c.name for c in found] == ["Direct Buyer"]
        assert len(await service.list_customers(tenant_id)) == 2

    @pytest.mark.asyncio
    async def test_bad_customer_type(self, service, tenant_id):
        with pytest.raises(ValidationError):
            await service.create_customer(tenant_id, "Shop", "Wholesale")

    @pytest.mark.asyncio
    async def test_product_cost_history(self, session, service, tenant_id):
        product = await service.create_product(
            tenant_id, "Gadget", "3", effective_from=datetime(2024, 1, 1, tzinfo=timezone.utc)
        )
        await service.add_product_cost(
            tenant_id,
            product.product_id,
            "3.25",
            effective_from=datetime(2024, 4, 1, 4, 0, tzinfo=timezone.utc),
        )

        history = await service.product_cost_history(tenant_id)
        assert [(row.cost, name) for row, name in history] == [
            (Decimal("3.25"), "Gadget"),
            (Decimal("3"), "Gadget"),
        ]

        resolver = CostHistoryResolver(session, "America/New_York")
        assert await resolver.product_cost(product.product_id, date(2024, 3, 31)) == Decimal("3")
        assert await resolver.product_cost(product.product_id, date(2024, 4, 1)) == Decimal("3.25")

    @pytest.mark.asyncio
    async def test_cost_for_unknown_product(self, service, tenant_id):
        with pytest.raises(NotFoundError):
            await service.add_product_cost(tenant_id, uuid4(), "1")

    @pytest.mark.asyncio
    async def test_negative_cost(self, service, tenant_id, test_products):
        with pytest.raises(ValidationError) as exc_info:
            await service.add_product_cost(tenant_id, test_products["widget"].product_id, "-1")
        assert exc_info.value.field == "cost"


class TestPartnersAndSuppliers:
    """Test named reference records."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, service, tenant_id, test_partner, test_supplier):
        await service.create_partner(tenant_id, "Agent Co")
        await service.create_supplier(tenant_id, "Bulk Goods")

        assert [p.name for p in await service.list_partners(tenant_id)] == ["Agent Co", "Reseller Co"]
        assert [s.name for s in await service.list_suppliers(tenant_id)] == [
            "Acme Supply",
            "Bulk Goods",
        ]

    @pytest.mark.asyncio
    async def test_name_required(self, service, tenant_id):
        with pytest.raises(ValidationError):
            await service.create_partner(tenant_id, "")
        with pytest.raises(ValidationError):
            await service.create_supplier(tenant_id, None)
