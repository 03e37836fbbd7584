"""Time entry recording: save, clock in/out, delete, list, summarize."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizops.calculators.time_summary import TimeSummary, summarize_entries
from bizops.config import get_settings
from bizops.errors import EmployeeInactiveError, ForbiddenError, NotFoundError, ValidationError
from bizops.models import Employee, TimeEntry
from bizops.services.approval import ensure_editable
from bizops.timeutil import current_hhmm, normalize_hhmm, parse_work_date, today_ymd

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for an omitted field (distinct from an explicit ``None``)."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def _rejected(message: str, field: str | None = None) -> ValidationError:
    logger.info("Time entry rejected: %s", message)
    return ValidationError(message, field=field)


def _clean_time(value: str | None, field: str) -> str | None:
    if value is None or not str(value).strip():
        return None
    normalized = normalize_hhmm(value)
    if normalized is None:
        raise _rejected(f"{field} must be HH:MM", field=field)
    return normalized


class TimeEntryService:
    """Service for employee time entries.

    One entry per employee and work date; saving for an existing day
    updates it. Approved entries are read-only.
    """

    def __init__(self, session: AsyncSession, tz: str | None = None):
        self.session = session
        self.tz = tz or get_settings().business_timezone

    async def get_employee(self, tenant_id: UUID, employee_id: UUID) -> Employee:
        result = await self.session.execute(
            select(Employee)
            .where(Employee.tenant_id == tenant_id)
            .where(Employee.employee_id == employee_id)
        )
        employee = result.scalar_one_or_none()
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def get_entry(self, tenant_id: UUID, entry_id: UUID) -> TimeEntry:
        result = await self.session.execute(
            select(TimeEntry)
            .where(TimeEntry.tenant_id == tenant_id)
            .where(TimeEntry.time_entry_id == entry_id)
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError("Time entry", entry_id)
        return entry

    async def find_entry(
        self,
        tenant_id: UUID,
        employee_id: UUID,
        work_date: date,
    ) -> TimeEntry | None:
        result = await self.session.execute(
            select(TimeEntry)
            .where(TimeEntry.tenant_id == tenant_id)
            .where(TimeEntry.employee_id == employee_id)
            .where(TimeEntry.work_date == work_date)
        )
        return result.scalar_one_or_none()

    async def save_entry(
        self,
        tenant_id: UUID,
        employee_id: UUID,
        work_date: date | str,
        start_time: str | None = UNSET,
        end_time: str | None = UNSET,
        notes: str | None = UNSET,
        entry_id: UUID | None = None,
    ) -> tuple[TimeEntry, bool]:
        """Create or update an entry.

        Fields left as ``UNSET`` keep their stored value; ``None`` clears
        them. Returns ``(entry, created)``.

        Raises:
            NotFoundError: unknown employee, or unknown ``entry_id``
            EmployeeInactiveError: employee is not active
            EntryLockedError: entry is approved
            ValidationError: bad date or time, or no time at all
        """
        employee = await self.get_employee(tenant_id, employee_id)
        if not employee.active:
            raise EmployeeInactiveError(employee_id)

        day = parse_work_date(work_date)
        if day is None:
            raise _rejected("work_date must be YYYY-MM-DD", field="work_date")

        start = UNSET if start_time is UNSET else _clean_time(start_time, "start_time")
        end = UNSET if end_time is UNSET else _clean_time(end_time, "end_time")

        if entry_id is not None:
            entry = await self.get_entry(tenant_id, entry_id)
            if entry.employee_id != employee_id:
                raise _rejected("Entry belongs to another employee", field="employee_id")
            if entry.work_date != day:
                clash = await self.find_entry(tenant_id, employee_id, day)
                if clash is not None:
                    raise _rejected(
                        "An entry already exists for this date", field="work_date"
                    )
        else:
            entry = await self.find_entry(tenant_id, employee_id, day)

        created = entry is None
        if entry is None:
            if not start and not end:
                raise _rejected("At least one of start_time or end_time is required")
            entry = TimeEntry(
                tenant_id=tenant_id,
                employee_id=employee_id,
                work_date=day,
                start_time=start or None,
                end_time=end or None,
                approved=False,
                notes=None if notes is UNSET else notes,
            )
            self.session.add(entry)
        else:
            ensure_editable(entry, "edit")
            entry.work_date = day
            if start is not UNSET:
                entry.start_time = start
            if end is not UNSET:
                entry.end_time = end
            if notes is not UNSET:
                entry.notes = notes
            if not entry.start_time and not entry.end_time:
                raise _rejected("At least one of start_time or end_time is required")

        entry.recompute_totals(employee.hourly_rate)
        await self.session.flush()

        logger.info(
            "Time entry %s %s for employee %s on %s",
            entry.time_entry_id,
            "created" if created else "updated",
            employee_id,
            day,
        )
        return entry, created

    async def clock_in(
        self,
        tenant_id: UUID,
        employee_id: UUID,
        now: datetime | None = None,
    ) -> TimeEntry:
        """Start today's shift at the current business time."""
        day = date.fromisoformat(today_ymd(self.tz, now))
        existing = await self.find_entry(tenant_id, employee_id, day)
        if existing is not None and existing.start_time:
            raise _rejected("Already clocked in today", field="start_time")

        entry, _ = await self.save_entry(
            tenant_id,
            employee_id,
            day,
            start_time=current_hhmm(self.tz, now),
        )
        return entry

    async def clock_out(
        self,
        tenant_id: UUID,
        employee_id: UUID,
        now: datetime | None = None,
    ) -> TimeEntry:
        """Close the open shift from today or, for overnight work, yesterday."""
        day = date.fromisoformat(today_ymd(self.tz, now))
        result = await self.session.execute(
            select(TimeEntry)
            .where(TimeEntry.tenant_id == tenant_id)
            .where(TimeEntry.employee_id == employee_id)
            .where(TimeEntry.work_date.in_([day, day - timedelta(days=1)]))
            .where(TimeEntry.start_time.is_not(None))
            .where(TimeEntry.end_time.is_(None))
            .order_by(TimeEntry.work_date.desc())
            .limit(1)
        )
        open_entry = result.scalar_one_or_none()
        if open_entry is None:
            raise _rejected("No open shift to clock out of", field="end_time")

        entry, _ = await self.save_entry(
            tenant_id,
            employee_id,
            open_entry.work_date,
            end_time=current_hhmm(self.tz, now),
            entry_id=open_entry.time_entry_id,
        )
        return entry

    async def delete_entry(
        self,
        tenant_id: UUID,
        entry_id: UUID,
        acting_employee_id: UUID | None = None,
    ) -> None:
        """Delete a pending entry.

        When ``acting_employee_id`` is given, only that employee's own
        entries may be deleted.
        """
        entry = await self.get_entry(tenant_id, entry_id)
        if acting_employee_id is not None and entry.employee_id != acting_employee_id:
            raise ForbiddenError("Cannot delete another employee's time entry")
        ensure_editable(entry, "delete")

        await self.session.delete(entry)
        await self.session.flush()
        logger.info("Time entry %s deleted", entry_id)

    async def list_entries(
        self,
        tenant_id: UUID,
        employee_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        approved: bool | None = None,
    ) -> list[TimeEntry]:
        """Entries newest day first, then by employee name."""
        query = (
            select(TimeEntry)
            .join(Employee, Employee.employee_id == TimeEntry.employee_id)
            .where(TimeEntry.tenant_id == tenant_id)
        )
        if employee_id is not None:
            query = query.where(TimeEntry.employee_id == employee_id)
        if date_from is not None:
            query = query.where(TimeEntry.work_date >= date_from)
        if date_to is not None:
            query = query.where(TimeEntry.work_date <= date_to)
        if approved is not None:
            query = query.where(TimeEntry.approved == approved)

        query = query.order_by(TimeEntry.work_date.desc(), Employee.name)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def employee_names(self, tenant_id: UUID) -> dict[UUID, str]:
        result = await self.session.execute(
            select(Employee.employee_id, Employee.name).where(Employee.tenant_id == tenant_id)
        )
        return {row.employee_id: row.name for row in result}

    async def summary(
        self,
        tenant_id: UUID,
        employee_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> TimeSummary:
        entries = await self.list_entries(tenant_id, employee_id, date_from, date_to)
        return summarize_entries(entries)
