"""Customers, partners, suppliers, products and their cost history."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from bizops.models.base import Base, TimestampMixin


class Customer(Base, TimestampMixin):
    """Customer account. ``Partner`` customers may carry partner splits."""

    __tablename__ = "customer"

    customer_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.tenant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    customer_type: Mapped[str] = mapped_column(String, nullable=False, default="BLV")

    __table_args__ = (
        CheckConstraint("customer_type IN ('BLV', 'Partner')", name="customer_type_check"),
    )

    @property
    def is_partner(self) -> bool:
        return self.customer_type == "Partner"


class Partner(Base, TimestampMixin):
    """Third party owed a per-unit share of an order."""

    __tablename__ = "partner"

    partner_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.tenant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)


class Supplier(Base, TimestampMixin):
    """Vendor that fulfils supplier orders."""

    __tablename__ = "supplier"

    supplier_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.tenant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)


class Product(Base, TimestampMixin):
    """Sellable product."""

    __tablename__ = "product"

    product_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.tenant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)


class ProductCostHistory(Base):
    """Unit cost of a product, effective from a point in time."""

    __tablename__ = "product_cost_history"

    history_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("product.product_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    effective_from: Mapped[datetime] = mapped_column(nullable=False)


class ShippingCostHistory(Base):
    """Per-unit shipping cost for a customer, effective from a point in time."""

    __tablename__ = "shipping_cost_history"

    history_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.tenant_id", ondelete="CASCADE"),
        nullable=False,
    )
    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("customer.customer_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    effective_from: Mapped[datetime] = mapped_column(nullable=False)
