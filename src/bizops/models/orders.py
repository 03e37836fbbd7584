"""Customer orders and partner splits."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizops.models.base import Base, UpdatedAtMixin


class Order(Base, UpdatedAtMixin):
    """Single-line customer order.

    ``product_cost`` and ``shipping_cost`` are per-unit overrides; when null,
    the historical defaults apply. ``item_cost`` is the historical product
    cost captured when the order was written.
    """

    __tablename__ = "customer_order"

    order_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.tenant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_no: Mapped[int] = mapped_column(Integer, nullable=False)
    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("customer.customer_id"),
        nullable=False,
    )
    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("product.product_id"),
        nullable=False,
    )
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    delivered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    delivered_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    delivery_status: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    shipping_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    item_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "order_no", name="customer_order_tenant_no_unique"),
        CheckConstraint("qty > 0", name="customer_order_qty_check"),
        CheckConstraint("delivered_quantity >= 0", name="customer_order_delivered_qty_check"),
    )

    splits: Mapped[list[OrderPartnerSplit]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderPartnerSplit.position",
    )


class OrderPartnerSplit(Base):
    """Per-unit amount owed to a partner on an order."""

    __tablename__ = "order_partner_split"

    split_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    order_id: Mapped[UUID] = mapped_column(
        ForeignKey("customer_order.order_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    partner_id: Mapped[UUID] = mapped_column(
        ForeignKey("partner.partner_id"),
        nullable=False,
    )
    amount_per_item: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    order: Mapped[Order] = relationship(back_populates="splits")
