"""Supplier (purchase) order service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bizops.calculators.rounding import ZERO, to_decimal
from bizops.errors import NotFoundError, ValidationError
from bizops.models import Product, Supplier, SupplierOrder, SupplierOrderItem
from bizops.services.delivery import DATE_FIELDS, SupplierOrderStateMachine, SupplierOrderStatus
from bizops.timeutil import parse_work_date

logger = logging.getLogger(__name__)


@dataclass
class SupplierLineInput:
    product_id: UUID | None
    qty: object
    product_cost: object
    shipping_cost: object = None


@dataclass
class SupplierOrderInput:
    """Supplier order fields as submitted by a client.

    Status comes either as ``status`` or as the three legacy flags.
    """

    supplier_id: UUID
    items: list[SupplierLineInput] = field(default_factory=list)
    order_date: date | str | None = None
    est_delivery_date: date | str | None = None
    notes: str | None = None
    status: str | None = None
    delivered: bool | None = None
    in_customs: bool | None = None
    received: bool | None = None
    delivery_date: date | str | None = None
    in_customs_date: date | str | None = None
    received_date: date | str | None = None

    def status_date(self, status: SupplierOrderStatus) -> date | None:
        value = {
            SupplierOrderStatus.DELIVERED: self.delivery_date,
            SupplierOrderStatus.IN_CUSTOMS: self.in_customs_date,
            SupplierOrderStatus.RECEIVED: self.received_date,
        }.get(status)
        return parse_work_date(value)


def _line_qty(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    parsed = to_decimal(value)
    if parsed is None or parsed != parsed.to_integral_value() or parsed < 1:
        return None
    return int(parsed)


def clean_lines(lines: list[SupplierLineInput]) -> list[tuple[UUID, int, Decimal, Decimal]]:
    """Keep lines with a product, an integer qty >= 1 and a numeric cost."""
    cleaned = []
    for line in lines:
        qty = _line_qty(line.qty)
        cost = to_decimal(line.product_cost)
        if line.product_id is None or qty is None or cost is None:
            continue
        shipping = to_decimal(line.shipping_cost)
        cleaned.append((line.product_id, qty, cost, shipping if shipping is not None else ZERO))
    return cleaned


class SupplierOrderService:
    """Service for supplier orders and their status lifecycle."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, tenant_id: UUID, order_id: UUID) -> SupplierOrder:
        result = await self.session.execute(
            select(SupplierOrder)
            .where(SupplierOrder.tenant_id == tenant_id)
            .where(SupplierOrder.supplier_order_id == order_id)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError("Supplier order", order_id)
        return order

    async def _ensure_supplier(self, tenant_id: UUID, supplier_id: UUID) -> None:
        result = await self.session.execute(
            select(Supplier.supplier_id)
            .where(Supplier.tenant_id == tenant_id)
            .where(Supplier.supplier_id == supplier_id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Supplier", supplier_id)

    async def _build_items(
        self, tenant_id: UUID, lines: list[SupplierLineInput]
    ) -> list[SupplierOrderItem]:
        cleaned = clean_lines(lines)
        if not cleaned:
            logger.info("Supplier order rejected: no valid lines out of %d", len(lines))
            raise ValidationError("At least one valid line is required", field="items")

        product_ids = {product_id for product_id, _, _, _ in cleaned}
        result = await self.session.execute(
            select(Product.product_id)
            .where(Product.tenant_id == tenant_id)
            .where(Product.product_id.in_(product_ids))
        )
        missing = product_ids - set(result.scalars().all())
        if missing:
            raise NotFoundError("Product", next(iter(missing)))

        return [
            SupplierOrderItem(
                tenant_id=tenant_id,
                product_id=product_id,
                qty=qty,
                product_cost=cost,
                shipping_cost=shipping,
                position=position,
            )
            for position, (product_id, qty, cost, shipping) in enumerate(cleaned)
        ]

    @staticmethod
    def _target_status(payload: SupplierOrderInput) -> SupplierOrderStatus | None:
        flags = (payload.delivered, payload.in_customs, payload.received)
        if payload.status:
            try:
                status = SupplierOrderStatus(payload.status)
            except ValueError:
                logger.info("Supplier order rejected: unknown status %r", payload.status)
                raise ValidationError(f"Unknown status '{payload.status}'", field="status") from None
            if any(flags):
                return SupplierOrderStatus.from_flags(*flags, status=status.value)
            return status
        if any(flag is not None for flag in flags):
            return SupplierOrderStatus.from_flags(*flags)
        return None

    def _apply_status(self, order: SupplierOrder, payload: SupplierOrderInput) -> None:
        target = self._target_status(payload)
        if target is None or target.value == order.status:
            return
        SupplierOrderStateMachine.transition(order, target.value, payload.status_date(target))

        # Keep dates the client sent for earlier steps
        reached = target.to_flags()
        for status, column in DATE_FIELDS.items():
            on_date = payload.status_date(status)
            if status is not target and reached[status.value] and on_date is not None:
                setattr(order, column, on_date)

    async def _next_order_no(self, tenant_id: UUID) -> int:
        result = await self.session.execute(
            select(func.max(SupplierOrder.order_no)).where(SupplierOrder.tenant_id == tenant_id)
        )
        return (result.scalar() or 0) + 1

    async def create(self, tenant_id: UUID, payload: SupplierOrderInput) -> SupplierOrder:
        await self._ensure_supplier(tenant_id, payload.supplier_id)
        items = await self._build_items(tenant_id, payload.items)

        order = SupplierOrder(
            tenant_id=tenant_id,
            order_no=await self._next_order_no(tenant_id),
            supplier_id=payload.supplier_id,
            order_date=parse_work_date(payload.order_date),
            est_delivery_date=parse_work_date(payload.est_delivery_date),
            status=SupplierOrderStatus.PENDING.value,
            notes=payload.notes,
            items=items,
        )
        self._apply_status(order, payload)
        self.session.add(order)
        await self.session.flush()

        logger.info(
            "Supplier order %s (#%d) created with %d lines",
            order.supplier_order_id,
            order.order_no,
            len(items),
        )
        return order

    async def update(
        self, tenant_id: UUID, order_id: UUID, payload: SupplierOrderInput
    ) -> SupplierOrder:
        order = await self.get(tenant_id, order_id)
        await self._ensure_supplier(tenant_id, payload.supplier_id)
        items = await self._build_items(tenant_id, payload.items)

        order.supplier_id = payload.supplier_id
        order.order_date = parse_work_date(payload.order_date)
        order.est_delivery_date = parse_work_date(payload.est_delivery_date)
        order.notes = payload.notes
        order.items = items
        self._apply_status(order, payload)
        await self.session.flush()

        logger.info("Supplier order %s updated", order_id)
        return order

    async def set_status(
        self,
        tenant_id: UUID,
        order_id: UUID,
        status: str,
        on_date: date | None = None,
    ) -> SupplierOrder:
        order = await self.get(tenant_id, order_id)
        previous = order.status
        SupplierOrderStateMachine.transition(order, status, on_date)
        await self.session.flush()

        logger.info("Supplier order %s: %s -> %s", order_id, previous, order.status)
        return order

    async def last_cost(
        self,
        tenant_id: UUID,
        supplier_id: UUID,
        product_id: UUID,
    ) -> Decimal | None:
        """Unit cost on the most recent line for this supplier and product."""
        result = await self.session.execute(
            select(SupplierOrderItem.product_cost)
            .join(
                SupplierOrder,
                SupplierOrder.supplier_order_id == SupplierOrderItem.supplier_order_id,
            )
            .where(SupplierOrder.tenant_id == tenant_id)
            .where(SupplierOrder.supplier_id == supplier_id)
            .where(SupplierOrderItem.product_id == product_id)
            .order_by(
                SupplierOrder.order_date.desc().nulls_last(),
                SupplierOrder.order_no.desc(),
                SupplierOrderItem.position.desc(),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def delete(self, tenant_id: UUID, order_id: UUID) -> None:
        order = await self.get(tenant_id, order_id)
        await self.session.delete(order)
        await self.session.flush()
        logger.info("Supplier order %s deleted", order_id)
