"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ============================================================================
# Common schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    error: str
    code: str | None = None
    field: str | None = None


class IdRequest(BaseModel):
    """Body carrying only a record id."""

    id: UUID


class OkResponse(BaseModel):
    ok: bool = True


# ============================================================================
# Time entry schemas
# ============================================================================


class TimeEntrySave(BaseModel):
    """Schema for creating or updating a time entry.

    Omitted time fields keep their stored value; explicit null clears them.
    """

    id: UUID | None = None
    employee_id: UUID
    work_date: date = Field(validation_alias=AliasChoices("work_date", "date"))
    start_time: str | None = None
    end_time: str | None = None
    notes: str | None = None


class TimeEntryResponse(BaseModel):
    """Schema for time entry response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(validation_alias=AliasChoices("id", "time_entry_id"))
    employee_id: UUID
    employee_name: str | None = None
    work_date: date
    start_time: str | None = None
    end_time: str | None = None
    total_hours: Decimal | None = None
    salary: Decimal | None = None
    approved: bool
    approved_by: str | None = None
    approved_at: datetime | None = None
    notes: str | None = None


class TimeEntryListResponse(BaseModel):
    items: list[TimeEntryResponse]
    total: int


class TimeEntrySaveResponse(BaseModel):
    """``created`` or ``updated`` is set, never both."""

    ok: bool = True
    id: UUID
    created: bool | None = None
    updated: bool | None = None


class ClockRequest(BaseModel):
    employee_id: UUID


class TimeSummaryResponse(BaseModel):
    """Schema for aggregated hours and earnings."""

    days_worked: int
    total_hours: Decimal
    approved_hours: Decimal
    pending_hours: Decimal
    total_earnings: Decimal
    entry_count: int
    pending_count: int


# ============================================================================
# Approval schemas
# ============================================================================


class ApprovalRequest(BaseModel):
    """Schema for approving or unapproving one entry."""

    id: UUID
    approved: bool
    approved_by: str | None = None


class BulkApprovalRequest(BaseModel):
    """Schema for approving several entries at once."""

    ids: list[UUID] = Field(min_length=1)
    approved_by: str | None = None


class ApprovalResultItem(BaseModel):
    id: UUID
    success: bool
    error: str | None = None


class BulkApprovalResponse(BaseModel):
    """Per-item outcome of a bulk approval."""

    results: list[ApprovalResultItem]
    success_count: int
    failure_count: int


# ============================================================================
# Order schemas
# ============================================================================


class PartnerSplitIn(BaseModel):
    """One partner's share; ``amount`` is the total for the whole order."""

    partner_id: UUID
    amount_per_item: Decimal | None = None
    amount: Decimal | None = None


class OrderCreate(BaseModel):
    """Schema for creating a customer order."""

    customer_id: UUID
    product_id: UUID
    qty: int
    unit_price: Decimal
    order_date: date = Field(validation_alias=AliasChoices("order_date", "date"))
    delivered: bool = False
    delivered_quantity: int | None = None
    delivery_status: str | None = None
    notes: str | None = None
    product_cost: Decimal | None = None
    shipping_cost: Decimal | None = None
    partner_splits: list[PartnerSplitIn] = Field(default_factory=list)


class OrderUpdate(OrderCreate):
    """Schema for replacing an order's fields."""

    id: UUID


class OrderCreatedResponse(BaseModel):
    ok: bool = True
    order_id: UUID
    order_no: int


class PartnerSplitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    partner_id: UUID
    amount_per_item: Decimal


class OrderFinancialsResponse(BaseModel):
    """Derived figures; profit fields are null when profit is hidden."""

    order_value: Decimal | None
    partner_total: Decimal
    product_cost_total: Decimal
    shipping_cost_total: Decimal
    profit: Decimal | None = None
    profit_percent: Decimal | None = None
    profit_visible: bool


class OrderResponse(BaseModel):
    """Schema for order response."""

    id: UUID
    order_no: int
    customer_id: UUID
    customer_name: str
    customer_type: str
    product_id: UUID
    product_name: str
    refund: bool
    qty: int
    unit_price: Decimal
    order_date: date
    delivered: bool
    delivered_quantity: int
    delivery_status: str
    notes: str | None = None
    product_cost: Decimal | None = None
    shipping_cost: Decimal | None = None
    item_cost: Decimal | None = None
    product_unit_cost: Decimal
    shipping_unit_cost: Decimal
    partner_splits: list[PartnerSplitResponse]
    financials: OrderFinancialsResponse


class DeliveryUpdate(BaseModel):
    """Schema for recording delivery progress."""

    id: UUID
    delivered: bool | None = None
    delivered_quantity: int | None = None


class DeliveryResponse(BaseModel):
    ok: bool = True
    id: UUID
    delivered: bool
    delivered_quantity: int
    delivery_status: str


class HistoricalCostsResponse(BaseModel):
    product_cost: Decimal | None = None
    shipping_cost: Decimal | None = None


# ============================================================================
# Supplier order schemas
# ============================================================================


class SupplierLineIn(BaseModel):
    """Raw supplier order line; invalid lines are dropped, not rejected."""

    product_id: UUID | None = None
    qty: Any = None
    product_cost: Any = None
    shipping_cost: Any = None


class SupplierOrderCreate(BaseModel):
    """Schema for creating a supplier order."""

    supplier_id: UUID
    items: list[SupplierLineIn] = Field(default_factory=list)
    order_date: date | None = None
    est_delivery_date: date | None = None
    notes: str | None = None
    status: str | None = None
    delivered: bool | None = None
    in_customs: bool | None = None
    received: bool | None = None
    delivery_date: date | None = None
    in_customs_date: date | None = None
    received_date: date | None = None


class SupplierOrderUpdate(SupplierOrderCreate):
    id: UUID


class SupplierOrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(validation_alias=AliasChoices("id", "item_id"))
    product_id: UUID
    qty: int
    product_cost: Decimal
    shipping_cost: Decimal


class SupplierOrderResponse(BaseModel):
    """Schema for supplier order response."""

    id: UUID
    order_no: int
    supplier_id: UUID
    order_date: date | None = None
    est_delivery_date: date | None = None
    status: str
    delivered: bool
    in_customs: bool
    received: bool
    delivery_date: date | None = None
    in_customs_date: date | None = None
    received_date: date | None = None
    notes: str | None = None
    items: list[SupplierOrderItemResponse]


class SupplierOrderSavedResponse(BaseModel):
    ok: bool = True
    id: UUID
    order_no: int


class SupplierStatusRequest(BaseModel):
    """Schema for moving a supplier order to a new status."""

    id: UUID
    status: str
    on_date: date | None = Field(default=None, validation_alias=AliasChoices("date", "on_date"))


class LastCostResponse(BaseModel):
    product_cost: Decimal | None = None


# ============================================================================
# Directory schemas
# ============================================================================


class EmployeeSave(BaseModel):
    """Create an employee, or update one when ``id`` is given."""

    id: UUID | None = None
    name: str | None = None
    employee_code: str | None = None
    hourly_rate: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("hourly_rate", "hour_salary")
    )
    active: bool | None = None


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(validation_alias=AliasChoices("id", "employee_id"))
    name: str
    employee_code: str | None = None
    hourly_rate: Decimal
    active: bool


class EmployeeListResponse(BaseModel):
    items: list[EmployeeResponse]
    total: int


class EmployeeSavedResponse(BaseModel):
    ok: bool = True
    id: UUID
    employee_code: str | None = None
    created: bool


class NextCodeResponse(BaseModel):
    employee_code: str


class CustomerCreate(BaseModel):
    name: str
    customer_type: str = "BLV"
    shipping_cost: Decimal | None = None


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(validation_alias=AliasChoices("id", "customer_id"))
    name: str
    customer_type: str


class ProductCreate(BaseModel):
    name: str
    cost: Decimal | None = None
    effective_from: datetime | None = None


class ProductCostCreate(BaseModel):
    """New unit cost for an existing product."""

    product_id: UUID
    cost: Decimal
    effective_from: datetime | None = None


class ProductCostResponse(BaseModel):
    product_id: UUID
    product_name: str | None = None
    cost: Decimal
    effective_from: datetime


class NamedCreate(BaseModel):
    name: str


class NamedResponse(BaseModel):
    id: UUID
    name: str
