"""Hours and earnings aggregation over time entries."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID

from bizops.calculators.rounding import ZERO
from bizops.timeutil import week_bounds


class TimeEntryLike(Protocol):
    """Fields the aggregator reads from an entry."""

    start_time: str | None
    end_time: str | None
    total_hours: Decimal | None
    salary: Decimal | None
    approved: bool


@dataclass(frozen=True)
class TimeSummary:
    """Totals for a set of entries.

    ``total_hours == approved_hours + pending_hours`` holds exactly.
    """

    days_worked: int = 0
    total_hours: Decimal = ZERO
    approved_hours: Decimal = ZERO
    pending_hours: Decimal = ZERO
    total_earnings: Decimal = ZERO
    entry_count: int = 0
    pending_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "days_worked": self.days_worked,
            "total_hours": self.total_hours,
            "approved_hours": self.approved_hours,
            "pending_hours": self.pending_hours,
            "total_earnings": self.total_earnings,
            "entry_count": self.entry_count,
            "pending_count": self.pending_count,
        }


def _amount(value: Decimal | None) -> Decimal:
    return value if value is not None else ZERO


def summarize_entries(entries: Iterable[TimeEntryLike]) -> TimeSummary:
    """Aggregate hours and earnings.

    Only completed shifts count as days worked. Missing hours or salary
    count as zero. Salary is taken as given, never derived from a rate.
    """
    days_worked = 0
    total_hours = ZERO
    approved_hours = ZERO
    total_earnings = ZERO
    entry_count = 0
    pending_count = 0

    for entry in entries:
        entry_count += 1
        hours = _amount(entry.total_hours)
        total_hours += hours
        total_earnings += _amount(entry.salary)
        if entry.approved:
            approved_hours += hours
        else:
            pending_count += 1
        if entry.start_time and entry.end_time:
            days_worked += 1

    return TimeSummary(
        days_worked=days_worked,
        total_hours=total_hours,
        approved_hours=approved_hours,
        pending_hours=total_hours - approved_hours,
        total_earnings=total_earnings,
        entry_count=entry_count,
        pending_count=pending_count,
    )


def summarize_by_employee(entries: Iterable[Any]) -> dict[UUID, TimeSummary]:
    """Per-employee summaries; entries need an ``employee_id``."""
    grouped: dict[UUID, list[Any]] = defaultdict(list)
    for entry in entries:
        grouped[entry.employee_id].append(entry)
    return {employee_id: summarize_entries(group) for employee_id, group in grouped.items()}


def summarize_week(entries: Iterable[Any], anchor: date) -> TimeSummary:
    """Summary of the Monday-Sunday week containing ``anchor``."""
    start, end = week_bounds(anchor)
    return summarize_entries(e for e in entries if start <= e.work_date <= end)
