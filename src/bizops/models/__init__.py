"""SQLAlchemy models for bizops."""

from bizops.models.base import Base, TimestampMixin, UpdatedAtMixin, utcnow
from bizops.models.catalog import (
    Customer,
    Partner,
    Product,
    ProductCostHistory,
    ShippingCostHistory,
    Supplier,
)
from bizops.models.company import Employee, Tenant
from bizops.models.orders import Order, OrderPartnerSplit
from bizops.models.supplier_orders import SupplierOrder, SupplierOrderItem
from bizops.models.time_entry import ApprovalStatus, TimeEntry

__all__ = [
    "ApprovalStatus",
    "Base",
    "Customer",
    "Employee",
    "Order",
    "OrderPartnerSplit",
    "Partner",
    "Product",
    "ProductCostHistory",
    "ShippingCostHistory",
    "Supplier",
    "SupplierOrder",
    "SupplierOrderItem",
    "Tenant",
    "TimeEntry",
    "TimestampMixin",
    "UpdatedAtMixin",
    "utcnow",
]
