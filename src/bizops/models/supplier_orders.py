"""Supplier (purchase) orders."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bizops.models.base import Base, TimestampMixin, UpdatedAtMixin


class SupplierOrder(Base, UpdatedAtMixin):
    """Purchase order header.

    ``status`` holds a single ``SupplierOrderStatus`` value; the date columns
    record when each milestone was reached.
    """

    __tablename__ = "supplier_order"

    supplier_order_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.tenant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_no: Mapped[int] = mapped_column(Integer, nullable=False)
    supplier_id: Mapped[UUID] = mapped_column(
        ForeignKey("supplier.supplier_id"),
        nullable=False,
    )
    order_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    est_delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    in_customs_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    received_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'delivered', 'in_customs', 'received')",
            name="supplier_order_status_check",
        ),
    )

    items: Mapped[list[SupplierOrderItem]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="SupplierOrderItem.position",
    )


class SupplierOrderItem(Base, TimestampMixin):
    """Purchase order line."""

    __tablename__ = "supplier_order_item"

    item_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.tenant_id", ondelete="CASCADE"),
        nullable=False,
    )
    supplier_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("supplier_order.supplier_order_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("product.product_id"),
        nullable=False,
    )
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    product_cost: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=Decimal("0"))
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=Decimal("0"))
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (CheckConstraint("qty >= 1", name="supplier_order_item_qty_check"),)

    order: Mapped[SupplierOrder] = relationship(back_populates="items")
