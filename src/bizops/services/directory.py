"""Reference records: employees, customers, products, partners and suppliers."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizops.calculators.rounding import round_precise, to_decimal
from bizops.errors import NotFoundError, ValidationError
from bizops.models import (
    Customer,
    Employee,
    Partner,
    Product,
    ProductCostHistory,
    ShippingCostHistory,
    Supplier,
    utcnow,
)

logger = logging.getLogger(__name__)

CUSTOMER_TYPES = ("BLV", "Partner")

_EMPLOYEE_CODE_RE = re.compile(r"^EMP(\d+)$")


def _rejected(message: str, field: str | None = None) -> ValidationError:
    logger.info("Record rejected: %s", message)
    return ValidationError(message, field=field)


def _required_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise _rejected("name is required", field="name")
    return cleaned


def _money(value: object, field: str) -> Decimal:
    amount = to_decimal(value)
    if amount is None or amount < 0:
        raise _rejected(f"{field} must be a number >= 0", field=field)
    return amount


def next_employee_code(codes: list[str | None]) -> str:
    """Next ``EMP###`` code after the highest one in use."""
    highest = 0
    for code in codes:
        match = _EMPLOYEE_CODE_RE.match(code or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"EMP{highest + 1:03d}"


@dataclass
class EmployeeInput:
    """Employee fields; ``None`` leaves a field unchanged on update."""

    name: str | None = None
    employee_code: str | None = None
    hourly_rate: object = None
    active: bool | None = None


class DirectoryService:
    """Create and list the records orders and time entries point at."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------------------------------
    # Employees
    # ------------------------------------------------------------------

    async def list_employees(self, tenant_id: UUID, active: bool | None = None) -> list[Employee]:
        """Active employees first, then by name."""
        query = select(Employee).where(Employee.tenant_id == tenant_id)
        if active is not None:
            query = query.where(Employee.active == active)
        result = await self.session.execute(
            query.order_by(Employee.active.desc(), Employee.name)
        )
        return list(result.scalars().all())

    async def get_employee(self, tenant_id: UUID, employee_id: UUID) -> Employee:
        result = await self.session.execute(
            select(Employee)
            .where(Employee.tenant_id == tenant_id)
            .where(Employee.employee_id == employee_id)
        )
        employee = result.scalar_one_or_none()
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def next_employee_code(self, tenant_id: UUID) -> str:
        result = await self.session.execute(
            select(Employee.employee_code).where(Employee.tenant_id == tenant_id)
        )
        return next_employee_code(list(result.scalars().all()))

    async def _ensure_code_free(
        self, tenant_id: UUID, code: str, employee_id: UUID | None = None
    ) -> None:
        query = (
            select(Employee.employee_id)
            .where(Employee.tenant_id == tenant_id)
            .where(Employee.employee_code == code)
        )
        if employee_id is not None:
            query = query.where(Employee.employee_id != employee_id)
        if (await self.session.execute(query)).first() is not None:
            raise _rejected(f"Employee code {code} is already in use", field="employee_code")

    async def save_employee(
        self,
        tenant_id: UUID,
        payload: EmployeeInput,
        employee_id: UUID | None = None,
    ) -> tuple[Employee, bool]:
        """Create an employee, or update the given one.

        A new employee without a code gets the next ``EMP###``. Returns
        ``(employee, created)``.
        """
        code = (payload.employee_code or "").strip() or None
        rate = None if payload.hourly_rate is None else _money(payload.hourly_rate, "hourly_rate")

        if employee_id is None:
            name = _required_name(payload.name)
            code = code or await self.next_employee_code(tenant_id)
            await self._ensure_code_free(tenant_id, code)
            employee = Employee(
                tenant_id=tenant_id,
                name=name,
                employee_code=code,
                hourly_rate=rate if rate is not None else Decimal("0"),
                active=True if payload.active is None else payload.active,
            )
            self.session.add(employee)
            await self.session.flush()
            logger.info("Employee %s created as %s", employee.employee_id, code)
            return employee, True

        employee = await self.get_employee(tenant_id, employee_id)
        if payload.name is not None:
            employee.name = _required_name(payload.name)
        if code is not None and code != employee.employee_code:
            await self._ensure_code_free(tenant_id, code, employee_id)
            employee.employee_code = code
        if rate is not None:
            employee.hourly_rate = rate
        if payload.active is not None:
            employee.active = payload.active
        await self.session.flush()
        return employee, False

    async def deactivate_employee(self, tenant_id: UUID, employee_id: UUID) -> Employee:
        """Soft delete: the employee and their entries stay on record."""
        employee = await self.get_employee(tenant_id, employee_id)
        employee.active = False
        await self.session.flush()
        logger.info("Employee %s deactivated", employee_id)
        return employee

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    async def list_customers(self, tenant_id: UUID, q: str | None = None) -> list[Customer]:
        query = select(Customer).where(Customer.tenant_id == tenant_id)
        if q and q.strip():
            query = query.where(Customer.name.ilike(f"%{q.strip()}%"))
        result = await self.session.execute(query.order_by(Customer.name))
        return list(result.scalars().all())

    async def create_customer(
        self,
        tenant_id: UUID,
        name: str | None,
        customer_type: str = "BLV",
        shipping_cost: object = None,
        effective_from: datetime | None = None,
    ) -> Customer:
        """Create a customer, with a first shipping cost if one is given."""
        if customer_type not in CUSTOMER_TYPES:
            raise _rejected("customer_type must be BLV or Partner", field="customer_type")
        shipping = None if shipping_cost is None else _money(shipping_cost, "shipping_cost")
        customer = Customer(
            tenant_id=tenant_id, name=_required_name(name), customer_type=customer_type
        )
        self.session.add(customer)
        await self.session.flush()

        if shipping is not None:
            self.session.add(
                ShippingCostHistory(
                    tenant_id=tenant_id,
                    customer_id=customer.customer_id,
                    shipping_cost=round_precise(shipping),
                    effective_from=effective_from or utcnow(),
                )
            )
            await self.session.flush()
        return customer

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def list_products(self, tenant_id: UUID) -> list[Product]:
        result = await self.session.execute(
            select(Product).where(Product.tenant_id == tenant_id).order_by(Product.name)
        )
        return list(result.scalars().all())

    async def get_product(self, tenant_id: UUID, product_id: UUID) -> Product:
        result = await self.session.execute(
            select(Product)
            .where(Product.tenant_id == tenant_id)
            .where(Product.product_id == product_id)
        )
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def create_product(
        self,
        tenant_id: UUID,
        name: str | None,
        cost: object = None,
        effective_from: datetime | None = None,
    ) -> Product:
        if cost is not None:
            _money(cost, "cost")
        product = Product(tenant_id=tenant_id, name=_required_name(name))
        self.session.add(product)
        await self.session.flush()
        if cost is not None:
            await self.add_product_cost(tenant_id, product.product_id, cost, effective_from)
        return product

    async def add_product_cost(
        self,
        tenant_id: UUID,
        product_id: UUID,
        cost: object,
        effective_from: datetime | None = None,
    ) -> ProductCostHistory:
        """Record a new unit cost; earlier orders keep the cost they had."""
        await self.get_product(tenant_id, product_id)
        row = ProductCostHistory(
            product_id=product_id,
            cost=round_precise(_money(cost, "cost")),
            effective_from=effective_from or utcnow(),
        )
        self.session.add(row)
        await self.session.flush()
        logger.info("Product %s cost set to %s from %s", product_id, row.cost, row.effective_from)
        return row

    async def product_cost_history(
        self, tenant_id: UUID
    ) -> list[tuple[ProductCostHistory, str]]:
        """Every cost row with its product name, by name then newest first."""
        result = await self.session.execute(
            select(ProductCostHistory, Product.name)
            .join(Product, Product.product_id == ProductCostHistory.product_id)
            .where(Product.tenant_id == tenant_id)
            .order_by(Product.name, ProductCostHistory.effective_from.desc())
        )
        return [(row, name) for row, name in result.all()]

    # ------------------------------------------------------------------
    # Partners and suppliers
    # ------------------------------------------------------------------

    async def list_partners(self, tenant_id: UUID) -> list[Partner]:
        result = await self.session.execute(
            select(Partner).where(Partner.tenant_id == tenant_id).order_by(Partner.name)
        )
        return list(result.scalars().all())

    async def create_partner(self, tenant_id: UUID, name: str | None) -> Partner:
        partner = Partner(tenant_id=tenant_id, name=_required_name(name))
        self.session.add(partner)
        await self.session.flush()
        return partner

    async def list_suppliers(self, tenant_id: UUID) -> list[Supplier]:
        result = await self.session.execute(
            select(Supplier).where(Supplier.tenant_id == tenant_id).order_by(Supplier.name)
        )
        return list(result.scalars().all())

    async def create_supplier(self, tenant_id: UUID, name: str | None) -> Supplier:
        supplier = Supplier(tenant_id=tenant_id, name=_required_name(name))
        self.session.add(supplier)
        await self.session.flush()
        return supplier
