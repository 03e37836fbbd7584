"""Customer order service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bizops.calculators.cost_history import CostHistoryResolver
from bizops.calculators.order_financials import (
    OrderFinancials,
    compute_order_financials,
    is_refund_product,
    resolve_effective_cost,
    validate_unit_price,
)
from bizops.calculators.rounding import round_precise, to_decimal
from bizops.config import get_settings
from bizops.errors import NotFoundError, ValidationError
from bizops.models import Customer, Order, OrderPartnerSplit, Partner, Product
from bizops.services.delivery import (
    DeliveryStatus,
    delivered_quantity_for_flag,
    resolve_status,
)
from bizops.timeutil import parse_work_date

logger = logging.getLogger(__name__)


@dataclass
class PartnerSplitInput:
    """A partner share, given per item or as a total for the order."""

    partner_id: UUID
    amount_per_item: Decimal | str | float | None = None
    amount: Decimal | str | float | None = None

    def per_item(self, qty: int) -> Decimal | None:
        rate = to_decimal(self.amount_per_item)
        if rate is not None:
            return rate
        total = to_decimal(self.amount)
        if total is None:
            return None
        return round_precise(total / qty)


@dataclass
class OrderInput:
    """Order fields as submitted by a client."""

    customer_id: UUID
    product_id: UUID
    qty: int
    unit_price: Decimal | str | float
    order_date: date | str
    delivered: bool = False
    delivered_quantity: int | None = None
    delivery_status: str | None = None
    notes: str | None = None
    product_cost: Decimal | str | float | None = None
    shipping_cost: Decimal | str | float | None = None
    partner_splits: list[PartnerSplitInput] = field(default_factory=list)


@dataclass
class OrderView:
    """An order with everything derived from it."""

    order: Order
    product_name: str
    customer_name: str
    customer_type: str
    refund: bool
    product_unit_cost: Decimal
    shipping_unit_cost: Decimal
    financials: OrderFinancials
    delivery_status: DeliveryStatus

    @property
    def splits(self) -> list[OrderPartnerSplit]:
        return self.order.splits


class OrderService:
    """Create, read, update and delete customer orders.

    Write rules:
    - qty is a positive integer
    - unit price sign matches the product (negative only for Refund/Discount)
    - partner splits only for Partner customers, with a positive amount
    - cost overrides stored only when usable (product > 0, shipping >= 0)
    - delivered flag and delivered quantity are kept in sync
    """

    def __init__(self, session: AsyncSession, tz: str | None = None, refund_name: str | None = None):
        settings = get_settings()
        self.session = session
        self.tz = tz or settings.business_timezone
        self.refund_name = refund_name or settings.refund_product_name
        self.costs = CostHistoryResolver(session, self.tz)

    async def _get_scoped(self, model, pk_column, tenant_id: UUID, pk: UUID, entity: str):
        result = await self.session.execute(
            select(model).where(model.tenant_id == tenant_id).where(pk_column == pk)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(entity, pk)
        return row

    async def get_order_row(self, tenant_id: UUID, order_id: UUID) -> Order:
        return await self._get_scoped(Order, Order.order_id, tenant_id, order_id, "Order")

    async def _next_order_no(self, tenant_id: UUID) -> int:
        result = await self.session.execute(
            select(func.max(Order.order_no)).where(Order.tenant_id == tenant_id)
        )
        return (result.scalar() or 0) + 1

    async def _validated(self, tenant_id: UUID, payload: OrderInput):
        try:
            return await self._check(tenant_id, payload)
        except ValidationError as exc:
            logger.info("Order rejected: %s", exc)
            raise

    async def _check(self, tenant_id: UUID, payload: OrderInput):
        customer = await self._get_scoped(
            Customer, Customer.customer_id, tenant_id, payload.customer_id, "Customer"
        )
        product = await self._get_scoped(
            Product, Product.product_id, tenant_id, payload.product_id, "Product"
        )

        qty = payload.qty
        if not isinstance(qty, int) or isinstance(qty, bool) or qty <= 0:
            raise ValidationError("qty must be a positive integer", field="qty")

        order_date = parse_work_date(payload.order_date)
        if order_date is None:
            raise ValidationError("order_date must be YYYY-MM-DD", field="order_date")

        refund = is_refund_product(product.name, self.refund_name)
        unit_price = validate_unit_price(payload.unit_price, refund)

        splits: list[OrderPartnerSplit] = []
        if customer.is_partner:
            for position, split in enumerate(payload.partner_splits):
                amount = split.per_item(qty)
                if amount is None or amount <= 0:
                    continue
                await self._get_scoped(
                    Partner, Partner.partner_id, tenant_id, split.partner_id, "Partner"
                )
                splits.append(
                    OrderPartnerSplit(
                        partner_id=split.partner_id,
                        amount_per_item=amount,
                        position=position,
                    )
                )

        product_cost = to_decimal(payload.product_cost)
        if product_cost is not None and product_cost <= 0:
            product_cost = None
        shipping_cost = to_decimal(payload.shipping_cost)
        if shipping_cost is not None and shipping_cost < 0:
            shipping_cost = None

        if payload.delivered_quantity is not None:
            delivered_quantity = max(0, min(int(payload.delivered_quantity), qty))
            delivered = delivered_quantity >= qty
        else:
            delivered = bool(payload.delivered)
            delivered_quantity = delivered_quantity_for_flag(delivered, qty)

        fields = {
            "customer_id": customer.customer_id,
            "product_id": product.product_id,
            "qty": qty,
            "unit_price": unit_price,
            "order_date": order_date,
            "delivered": delivered,
            "delivered_quantity": delivered_quantity,
            "delivery_status": payload.delivery_status or None,
            "notes": payload.notes,
            "product_cost": product_cost,
            "shipping_cost": shipping_cost,
        }
        return fields, splits

    async def create_order(self, tenant_id: UUID, payload: OrderInput) -> Order:
        fields, splits = await self._validated(tenant_id, payload)
        item_cost = await self.costs.product_cost(fields["product_id"], fields["order_date"])

        order = Order(
            tenant_id=tenant_id,
            order_no=await self._next_order_no(tenant_id),
            item_cost=item_cost,
            splits=splits,
            **fields,
        )
        self.session.add(order)
        await self.session.flush()

        logger.info("Order %s (#%d) created", order.order_id, order.order_no)
        return order

    async def update_order(self, tenant_id: UUID, order_id: UUID, payload: OrderInput) -> Order:
        order = await self.get_order_row(tenant_id, order_id)
        fields, splits = await self._validated(tenant_id, payload)

        if (
            fields["product_id"] != order.product_id
            or fields["order_date"] != order.order_date
            or order.item_cost is None
        ):
            order.item_cost = await self.costs.product_cost(
                fields["product_id"], fields["order_date"]
            )

        for name, value in fields.items():
            setattr(order, name, value)
        order.splits = splits
        await self.session.flush()

        logger.info("Order %s updated", order_id)
        return order

    async def get_order(self, tenant_id: UUID, order_id: UUID) -> OrderView:
        order = await self.get_order_row(tenant_id, order_id)
        product = await self._get_scoped(
            Product, Product.product_id, tenant_id, order.product_id, "Product"
        )
        customer = await self._get_scoped(
            Customer, Customer.customer_id, tenant_id, order.customer_id, "Customer"
        )

        historical_product = order.item_cost
        if historical_product is None:
            historical_product = await self.costs.product_cost(order.product_id, order.order_date)
        historical_shipping = await self.costs.shipping_cost(
            tenant_id, order.customer_id, order.order_date
        )

        product_unit_cost = resolve_effective_cost(order.product_cost, historical_product)
        shipping_unit_cost = resolve_effective_cost(order.shipping_cost, historical_shipping)
        refund = is_refund_product(product.name, self.refund_name)
        partner_rates = [s.amount_per_item for s in order.splits] if customer.is_partner else []

        financials = compute_order_financials(
            order.qty,
            order.unit_price,
            partner_rates,
            product_unit_cost,
            shipping_unit_cost,
            refund=refund,
        )
        status = resolve_status(
            order.delivery_status,
            order.delivered_quantity,
            order.qty,
            order.delivered,
        )

        return OrderView(
            order=order,
            product_name=product.name,
            customer_name=customer.name,
            customer_type=customer.customer_type,
            refund=refund,
            product_unit_cost=product_unit_cost,
            shipping_unit_cost=shipping_unit_cost,
            financials=financials,
            delivery_status=status,
        )

    async def set_delivery(
        self,
        tenant_id: UUID,
        order_id: UUID,
        delivered: bool | None = None,
        delivered_quantity: int | None = None,
    ) -> Order:
        """Record delivery progress.

        A quantity wins over the flag and is clamped to ``0..qty``.
        """
        if delivered is None and delivered_quantity is None:
            raise ValidationError("delivered or delivered_quantity is required")

        order = await self.get_order_row(tenant_id, order_id)
        if delivered_quantity is not None:
            order.delivered_quantity = max(0, min(int(delivered_quantity), order.qty))
            order.delivered = order.delivered_quantity >= order.qty
        else:
            order.delivered = bool(delivered)
            order.delivered_quantity = delivered_quantity_for_flag(order.delivered, order.qty)

        order.delivery_status = resolve_status(
            None, order.delivered_quantity, order.qty, order.delivered
        ).value
        await self.session.flush()

        logger.info(
            "Order %s delivery set to %s (%d/%d)",
            order_id,
            order.delivery_status,
            order.delivered_quantity,
            order.qty,
        )
        return order

    async def delete_order(self, tenant_id: UUID, order_id: UUID) -> None:
        order = await self.get_order_row(tenant_id, order_id)
        await self.session.delete(order)
        await self.session.flush()
        logger.info("Order %s deleted", order_id)
