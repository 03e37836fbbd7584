"""Delivery status for customer orders and supplier orders."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

from bizops.errors import ContradictoryStatusError, InvalidTransitionError

if TYPE_CHECKING:
    from bizops.models import SupplierOrder


class DeliveryStatus(str, Enum):
    """Customer order delivery status values."""

    NOT_DELIVERED = "not_delivered"
    PARTIAL = "partial"
    DELIVERED = "delivered"


def _as_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return None


def resolve_status(
    explicit_status: str | None,
    delivered_qty: object,
    total_qty: object,
    delivered_bool: bool | None,
) -> DeliveryStatus:
    """Display status for an order.

    Precedence:
    1. A recognised explicit status
    2. Delivered vs. total quantity, when both are known
    3. The delivered flag
    """
    if explicit_status:
        try:
            return DeliveryStatus(str(explicit_status).strip().lower())
        except ValueError:
            pass

    delivered = _as_int(delivered_qty)
    total = _as_int(total_qty)
    if delivered is not None and total is not None:
        if delivered <= 0:
            return DeliveryStatus.NOT_DELIVERED
        if delivered >= total:
            return DeliveryStatus.DELIVERED
        return DeliveryStatus.PARTIAL

    return DeliveryStatus.DELIVERED if delivered_bool else DeliveryStatus.NOT_DELIVERED


def delivered_quantity_for_flag(delivered: bool, total_qty: int) -> int:
    """Quantity implied by toggling the delivered flag."""
    return total_qty if delivered else 0


class SupplierOrderStatus(str, Enum):
    """Supplier order status; exactly one holds at a time."""

    PENDING = "pending"
    DELIVERED = "delivered"
    IN_CUSTOMS = "in_customs"
    RECEIVED = "received"

    @classmethod
    def from_flags(
        cls,
        delivered: bool = False,
        in_customs: bool = False,
        received: bool = False,
        status: str | None = None,
    ) -> SupplierOrderStatus:
        """Build a status from the legacy boolean columns.

        The flags accumulate as an order moves along, so the furthest one
        set wins. A ``status`` given alongside them must name that same
        status.
        """
        flags = {
            cls.DELIVERED: bool(delivered),
            cls.IN_CUSTOMS: bool(in_customs),
            cls.RECEIVED: bool(received),
        }
        reached = cls.PENDING
        for member, value in flags.items():
            if value:
                reached = member

        if status is not None and status != reached.value:
            set_flags = [member.value for member, value in flags.items() if value]
            raise ContradictoryStatusError([f"status={status}", *set_flags])
        return reached

    def to_flags(self) -> dict[str, bool]:
        """Flags for this status; every earlier step is flagged too."""
        members = list(type(self))
        reached = members.index(self)
        return {member.value: members.index(member) <= reached for member in members[1:]}


_ORDER = [
    SupplierOrderStatus.PENDING,
    SupplierOrderStatus.DELIVERED,
    SupplierOrderStatus.IN_CUSTOMS,
    SupplierOrderStatus.RECEIVED,
]

# Date column stamped when a status is reached
DATE_FIELDS = {
    SupplierOrderStatus.DELIVERED: "delivery_date",
    SupplierOrderStatus.IN_CUSTOMS: "in_customs_date",
    SupplierOrderStatus.RECEIVED: "received_date",
}


class SupplierOrderStateMachine:
    """State machine for supplier order status.

    Allowed transitions:
    - forward along pending → delivered → in_customs → received (steps may be skipped)
    - any status → pending (correction)
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        status: list(_ORDER[i + 1 :])
        + ([SupplierOrderStatus.PENDING] if status is not SupplierOrderStatus.PENDING else [])
        for i, status in enumerate(_ORDER)
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])

    @classmethod
    def transition(
        cls,
        order: SupplierOrder,
        to_status: str,
        on_date: date | None = None,
    ) -> SupplierOrder:
        """Move ``order`` to ``to_status``.

        The target's date column is stamped with ``on_date`` (today when
        omitted). Dates of statuses past the target are cleared; dates of
        skipped intermediate statuses are left as they were.
        """
        try:
            target = SupplierOrderStatus(to_status)
        except ValueError:
            raise InvalidTransitionError(order.status, str(to_status), "unknown status") from None

        cls.validate_transition(order.status, target.value)

        reached = _ORDER.index(target)
        for status, column in DATE_FIELDS.items():
            if _ORDER.index(status) > reached:
                setattr(order, column, None)
        if target in DATE_FIELDS:
            setattr(order, DATE_FIELDS[target], on_date or date.today())

        order.status = target.value
        return order
