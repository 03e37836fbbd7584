"""Tests for the time entry service."""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from bizops.errors import (
    EmployeeInactiveError,
    EntryLockedError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from bizops.services.approval import approve
from bizops.services.time_entries import TimeEntryService

DAY = date(2024, 3, 15)


@pytest.fixture
def service(session):
    return TimeEntryService(session, tz="America/New_York")


class TestSaveEntry:
    """Test create-or-update by employee and day."""

    @pytest.mark.asyncio
    async def test_create_computes_totals(self, service, tenant_id, test_employee):
        entry, created = await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="9:00", end_time="17:30"
        )

        assert created is True
        assert entry.start_time == "09:00"
        assert entry.total_hours == Decimal("8.5")
        assert entry.salary == Decimal("170.00")
        assert entry.approved is False

    @pytest.mark.asyncio
    async def test_second_save_same_day_updates(self, service, tenant_id, test_employee):
        first, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="09:00"
        )
        assert first.total_hours is None

        second, created = await service.save_entry(
            tenant_id, test_employee.employee_id, "2024-03-15", end_time="13:00"
        )

        assert created is False
        assert second.time_entry_id == first.time_entry_id
        assert second.start_time == "09:00"
        assert second.total_hours == Decimal("4")
        assert second.salary == Decimal("80.00")

    @pytest.mark.asyncio
    async def test_overnight_shift(self, service, tenant_id, test_employee):
        entry, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="22:00", end_time="02:00"
        )
        assert entry.total_hours == Decimal("4")

    @pytest.mark.asyncio
    async def test_explicit_none_clears_time(self, service, tenant_id, test_employee):
        await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="09:00", end_time="17:00"
        )
        entry, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, end_time=None
        )

        assert entry.end_time is None
        assert entry.total_hours is None
        assert entry.salary is None

    @pytest.mark.asyncio
    async def test_requires_a_time(self, service, tenant_id, test_employee):
        with pytest.raises(ValidationError):
            await service.save_entry(tenant_id, test_employee.employee_id, DAY)

    @pytest.mark.asyncio
    async def test_rejects_bad_time(self, service, tenant_id, test_employee):
        with pytest.raises(ValidationError) as exc_info:
            await service.save_entry(
                tenant_id, test_employee.employee_id, DAY, start_time="25:00"
            )
        assert exc_info.value.field == "start_time"

    @pytest.mark.asyncio
    async def test_rejection_is_logged(self, service, tenant_id, test_employee, caplog):
        caplog.set_level(logging.INFO, logger="bizops.services.time_entries")
        with pytest.raises(ValidationError):
            await service.save_entry(
                tenant_id, test_employee.employee_id, "not a date", start_time="09:00"
            )
        assert "Time entry rejected: work_date must be YYYY-MM-DD" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_employee(self, service, tenant_id):
        with pytest.raises(NotFoundError):
            await service.save_entry(tenant_id, uuid4(), DAY, start_time="09:00")

    @pytest.mark.asyncio
    async def test_other_tenant_employee_not_found(
        self, service, other_tenant, test_employee
    ):
        with pytest.raises(NotFoundError):
            await service.save_entry(
                other_tenant.tenant_id, test_employee.employee_id, DAY, start_time="09:00"
            )

    @pytest.mark.asyncio
    async def test_inactive_employee(self, service, tenant_id, inactive_employee):
        with pytest.raises(EmployeeInactiveError):
            await service.save_entry(
                tenant_id, inactive_employee.employee_id, DAY, start_time="09:00"
            )

    @pytest.mark.asyncio
    async def test_approved_entry_is_locked(self, service, tenant_id, test_employee):
        entry, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="09:00", end_time="17:00"
        )
        approve(entry, "boss")

        with pytest.raises(EntryLockedError):
            await service.save_entry(
                tenant_id, test_employee.employee_id, DAY, end_time="18:00"
            )

    @pytest.mark.asyncio
    async def test_update_by_id_cannot_collide(self, service, tenant_id, test_employee):
        await service.save_entry(
            tenant_id, test_employee.employee_id, date(2024, 3, 14), start_time="09:00"
        )
        entry, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="09:00"
        )

        with pytest.raises(ValidationError):
            await service.save_entry(
                tenant_id,
                test_employee.employee_id,
                date(2024, 3, 14),
                entry_id=entry.time_entry_id,
            )


class TestClock:
    """Test clock in and clock out in business time."""

    @pytest.mark.asyncio
    async def test_clock_in_and_out(self, service, tenant_id, test_employee):
        morning = datetime(2024, 3, 15, 13, 5, tzinfo=timezone.utc)  # 09:05 EDT
        evening = datetime(2024, 3, 15, 21, 35, tzinfo=timezone.utc)  # 17:35 EDT

        entry = await service.clock_in(tenant_id, test_employee.employee_id, morning)
        assert entry.work_date == DAY
        assert entry.start_time == "09:05"

        closed = await service.clock_out(tenant_id, test_employee.employee_id, evening)
        assert closed.time_entry_id == entry.time_entry_id
        assert closed.end_time == "17:35"
        assert closed.total_hours == Decimal("8.5")

    @pytest.mark.asyncio
    async def test_double_clock_in(self, service, tenant_id, test_employee):
        now = datetime(2024, 3, 15, 13, 0, tzinfo=timezone.utc)
        await service.clock_in(tenant_id, test_employee.employee_id, now)

        with pytest.raises(ValidationError):
            await service.clock_in(tenant_id, test_employee.employee_id, now)

    @pytest.mark.asyncio
    async def test_clock_out_without_open_shift(self, service, tenant_id, test_employee):
        with pytest.raises(ValidationError):
            await service.clock_out(
                tenant_id,
                test_employee.employee_id,
                datetime(2024, 3, 15, 21, 0, tzinfo=timezone.utc),
            )

    @pytest.mark.asyncio
    async def test_clock_out_after_midnight(self, service, tenant_id, test_employee):
        late = datetime(2024, 3, 16, 2, 0, tzinfo=timezone.utc)  # 22:00 EDT on the 15th
        after_midnight = datetime(2024, 3, 16, 6, 30, tzinfo=timezone.utc)  # 02:30 EDT

        entry = await service.clock_in(tenant_id, test_employee.employee_id, late)
        closed = await service.clock_out(tenant_id, test_employee.employee_id, after_midnight)

        assert closed.time_entry_id == entry.time_entry_id
        assert closed.work_date == DAY
        assert closed.total_hours == Decimal("4.5")


class TestDeleteAndList:
    """Test deletion guards, listing and summary."""

    @pytest.mark.asyncio
    async def test_delete(self, service, tenant_id, test_employee):
        entry, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="09:00"
        )
        await service.delete_entry(tenant_id, entry.time_entry_id)

        with pytest.raises(NotFoundError):
            await service.get_entry(tenant_id, entry.time_entry_id)

    @pytest.mark.asyncio
    async def test_delete_approved_is_locked(self, service, tenant_id, test_employee):
        entry, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="09:00"
        )
        approve(entry, "boss")

        with pytest.raises(EntryLockedError):
            await service.delete_entry(tenant_id, entry.time_entry_id)

    @pytest.mark.asyncio
    async def test_employee_deletes_only_own(
        self, service, tenant_id, test_employee, second_employee
    ):
        entry, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="09:00"
        )

        with pytest.raises(ForbiddenError):
            await service.delete_entry(
                tenant_id, entry.time_entry_id, acting_employee_id=second_employee.employee_id
            )
        await service.delete_entry(
            tenant_id, entry.time_entry_id, acting_employee_id=test_employee.employee_id
        )

    @pytest.mark.asyncio
    async def test_list_order_and_filters(
        self, service, tenant_id, test_employee, second_employee
    ):
        await service.save_entry(
            tenant_id, second_employee.employee_id, DAY, start_time="09:00", end_time="10:00"
        )
        await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="09:00", end_time="11:00"
        )
        older, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, date(2024, 3, 14), start_time="09:00", end_time="12:00"
        )
        approve(older, "boss")
        await service.session.flush()

        entries = await service.list_entries(tenant_id)
        assert [(e.work_date, e.employee_id) for e in entries] == [
            (DAY, test_employee.employee_id),
            (DAY, second_employee.employee_id),
            (date(2024, 3, 14), test_employee.employee_id),
        ]

        approved = await service.list_entries(tenant_id, approved=True)
        assert [e.time_entry_id for e in approved] == [older.time_entry_id]

        only_day = await service.list_entries(tenant_id, date_from=DAY, date_to=DAY)
        assert len(only_day) == 2

    @pytest.mark.asyncio
    async def test_summary(self, service, tenant_id, test_employee):
        approved_entry, _ = await service.save_entry(
            tenant_id, test_employee.employee_id, date(2024, 3, 14), start_time="09:00", end_time="17:00"
        )
        approve(approved_entry, "boss")
        await service.save_entry(
            tenant_id, test_employee.employee_id, DAY, start_time="09:00", end_time="13:00"
        )
        await service.session.flush()

        summary = await service.summary(tenant_id, test_employee.employee_id)

        assert summary.days_worked == 2
        assert summary.total_hours == Decimal("12")
        assert summary.approved_hours == Decimal("8")
        assert summary.pending_hours == Decimal("4")
        assert summary.total_earnings == Decimal("240.00")
