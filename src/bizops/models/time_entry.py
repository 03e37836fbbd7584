"""Employee time entry (clock-in/out pair for one calendar day)."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from bizops.calculators.rounding import round_to_cents
from bizops.models.base import Base, UpdatedAtMixin
from bizops.timeutil import diff_hours


class ApprovalStatus(str, Enum):
    """Approval status values."""

    PENDING = "pending"
    APPROVED = "approved"


class TimeEntry(Base, UpdatedAtMixin):
    """One employee's shift on a work date.

    ``total_hours`` and ``salary`` are derived; call ``recompute_totals``
    after changing either time.
    """

    __tablename__ = "time_entry"

    time_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.tenant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    total_hours: Mapped[Decimal | None] = mapped_column(Numeric(8, 4), nullable=True)
    salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "employee_id", "work_date", name="time_entry_employee_day_unique"),
    )

    @property
    def is_complete(self) -> bool:
        """Both clock-in and clock-out are recorded."""
        return bool(self.start_time) and bool(self.end_time)

    @property
    def approval_status(self) -> ApprovalStatus:
        return ApprovalStatus.APPROVED if self.approved else ApprovalStatus.PENDING

    def recompute_totals(self, hourly_rate: Decimal | None) -> None:
        """Refresh derived hours and pay from the current times."""
        if not self.is_complete:
            self.total_hours = None
            self.salary = None
            return

        self.total_hours = diff_hours(self.start_time, self.end_time)
        if self.total_hours is None or hourly_rate is None:
            self.salary = None
        else:
            self.salary = round_to_cents(self.total_hours * hourly_rate)
