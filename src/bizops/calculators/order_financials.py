"""Order value, partner split, and profit derivation.

Sign conventions:
- Regular products: unit price strictly positive
- Refund/Discount product: unit price strictly negative, profit not shown

Profit is only meaningful for a positive order value; otherwise profit and
profit percent are reported as zero.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from bizops.calculators.rounding import ZERO, round_to_cents, to_decimal
from bizops.errors import ValidationError

DEFAULT_REFUND_PRODUCT_NAME = "Refund/Discount"
PERCENT_PRECISION = Decimal("0.01")


def _valid_qty(qty: object) -> bool:
    return isinstance(qty, int) and not isinstance(qty, bool) and qty > 0


def compute_order_value(qty: object, unit_price: object) -> Decimal | None:
    """``qty * unit_price``, or ``None`` when not computable."""
    price = to_decimal(unit_price)
    if not _valid_qty(qty) or price is None:
        return None
    return Decimal(qty) * price  # type: ignore[arg-type]


def compute_partner_total(amount_per_item: object, qty: object) -> Decimal:
    """Partner share for the whole order; zero unless both factors are positive."""
    rate = to_decimal(amount_per_item)
    if rate is None or rate <= 0 or not _valid_qty(qty):
        return ZERO
    return rate * Decimal(qty)  # type: ignore[arg-type]


def compute_profit(
    order_value: Decimal | None,
    partner_totals: Iterable[Decimal],
    product_cost_total: Decimal,
    shipping_cost_total: Decimal,
) -> Decimal:
    if order_value is None or order_value <= 0:
        return ZERO
    return order_value - sum(partner_totals, ZERO) - product_cost_total - shipping_cost_total


def compute_profit_percent(profit: Decimal, order_value: Decimal | None) -> Decimal:
    if order_value is None or order_value <= 0:
        return ZERO
    return profit / order_value * Decimal(100)


def resolve_effective_cost(override: object, historical: object) -> Decimal:
    """Per-unit cost: a parseable override wins, then history, then zero."""
    parsed_override = to_decimal(override)
    if parsed_override is not None:
        return parsed_override
    parsed_historical = to_decimal(historical)
    if parsed_historical is not None:
        return parsed_historical
    return ZERO


def is_refund_product(name: str | None, refund_name: str = DEFAULT_REFUND_PRODUCT_NAME) -> bool:
    return (name or "").strip().lower() == refund_name.strip().lower()


def validate_unit_price(unit_price: object, refund: bool) -> Decimal:
    """Check the price sign for the product type and return it as Decimal."""
    price = to_decimal(unit_price)
    if price is None:
        raise ValidationError("unit_price must be a number", field="unit_price")
    if refund and not price < 0:
        raise ValidationError("Refund/Discount requires unit_price < 0", field="unit_price")
    if not refund and not price > 0:
        raise ValidationError("unit_price must be > 0", field="unit_price")
    return price


@dataclass(frozen=True)
class OrderFinancials:
    """Derived money figures for an order."""

    order_value: Decimal | None
    partner_totals: tuple[Decimal, ...] = field(default_factory=tuple)
    product_cost_total: Decimal = ZERO
    shipping_cost_total: Decimal = ZERO
    profit: Decimal = ZERO
    profit_percent: Decimal = ZERO
    profit_visible: bool = False

    @property
    def partner_total(self) -> Decimal:
        return sum(self.partner_totals, ZERO)

    def rounded(self) -> OrderFinancials:
        """Copy with money in cents and percent at 2 places."""
        return OrderFinancials(
            order_value=round_to_cents(self.order_value) if self.order_value is not None else None,
            partner_totals=tuple(round_to_cents(t) for t in self.partner_totals),
            product_cost_total=round_to_cents(self.product_cost_total),
            shipping_cost_total=round_to_cents(self.shipping_cost_total),
            profit=round_to_cents(self.profit),
            profit_percent=self.profit_percent.quantize(PERCENT_PRECISION, rounding=ROUND_HALF_UP),
            profit_visible=self.profit_visible,
        )


def compute_order_financials(
    qty: object,
    unit_price: object,
    partner_rates: Sequence[object] = (),
    product_cost: object = None,
    shipping_cost: object = None,
    refund: bool = False,
) -> OrderFinancials:
    """Full derivation for one order.

    ``product_cost`` and ``shipping_cost`` are effective per-unit costs
    (see ``resolve_effective_cost``).
    """
    order_value = compute_order_value(qty, unit_price)
    partner_totals = tuple(compute_partner_total(rate, qty) for rate in partner_rates)

    units = Decimal(qty) if _valid_qty(qty) else ZERO  # type: ignore[arg-type]
    product_cost_total = resolve_effective_cost(product_cost, None) * units
    shipping_cost_total = resolve_effective_cost(shipping_cost, None) * units

    profit = compute_profit(order_value, partner_totals, product_cost_total, shipping_cost_total)
    profit_percent = compute_profit_percent(profit, order_value)
    visible = not refund and order_value is not None and order_value > 0

    return OrderFinancials(
        order_value=order_value,
        partner_totals=partner_totals,
        product_cost_total=product_cost_total,
        shipping_cost_total=shipping_cost_total,
        profit=profit,
        profit_percent=profit_percent,
        profit_visible=visible,
    )
