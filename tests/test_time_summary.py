"""Tests for time entry aggregation."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from bizops.calculators.time_summary import (
    summarize_by_employee,
    summarize_entries,
    summarize_week,
)


@dataclass
class Entry:
    start_time: str | None
    end_time: str | None
    total_hours: Decimal | None
    salary: Decimal | None
    approved: bool
    employee_id: UUID | None = None
    work_date: date | None = None


class TestSummarizeEntries:
    """Test hours and earnings totals."""

    def test_empty(self):
        summary = summarize_entries([])
        assert summary.days_worked == 0
        assert summary.total_hours == 0
        assert summary.entry_count == 0

    def test_totals_split_by_approval(self):
        entries = [
            Entry("09:00", "17:00", Decimal("8"), Decimal("160.00"), True),
            Entry("09:00", "13:30", Decimal("4.5"), Decimal("90.00"), False),
            Entry("22:00", "02:00", Decimal("4"), Decimal("80.00"), True),
        ]
        summary = summarize_entries(entries)

        assert summary.days_worked == 3
        assert summary.total_hours == Decimal("16.5")
        assert summary.approved_hours == Decimal("12")
        assert summary.pending_hours == Decimal("4.5")
        assert summary.total_earnings == Decimal("330.00")
        assert summary.pending_count == 1
        assert summary.total_hours == summary.approved_hours + summary.pending_hours

    def test_open_shift_not_a_day_worked(self):
        entries = [
            Entry("09:00", None, None, None, False),
            Entry("09:00", "10:00", Decimal("1"), None, False),
        ]
        summary = summarize_entries(entries)

        assert summary.days_worked == 1
        assert summary.total_hours == Decimal("1")
        assert summary.total_earnings == Decimal("0")
        assert summary.entry_count == 2

    def test_salary_taken_as_given(self):
        # Stored pay is not re-derived from hours
        entries = [Entry("09:00", "10:00", Decimal("1"), Decimal("999.99"), True)]
        assert summarize_entries(entries).total_earnings == Decimal("999.99")

    def test_input_order_does_not_matter(self):
        entries = [
            Entry("09:00", "17:00", Decimal("8"), Decimal("160.00"), True),
            Entry("09:00", None, None, None, False),
            Entry("22:00", "02:00", Decimal("4"), Decimal("80.00"), False),
            Entry("10:00", "10:45", Decimal("0.75"), Decimal("15.00"), True),
        ]
        assert summarize_entries(entries) == summarize_entries(list(reversed(entries)))
        assert summarize_entries(entries[1:] + entries[:1]) == summarize_entries(entries)

    def test_repeat_calls_agree(self):
        entries = [
            Entry("09:00", "17:00", Decimal("8"), Decimal("160.00"), True),
            Entry("09:00", "13:30", Decimal("4.5"), Decimal("90.00"), False),
        ]
        first = summarize_entries(entries)
        second = summarize_entries(entries)

        assert first == second
        assert first.to_dict() == second.to_dict()
        assert entries[1].total_hours == Decimal("4.5")

    def test_accepts_a_generator(self):
        entries = [Entry("09:00", "10:00", Decimal("1"), Decimal("20"), True)]
        assert summarize_entries(e for e in entries) == summarize_entries(entries)

    def test_to_dict_keys(self):
        data = summarize_entries([]).to_dict()
        assert set(data) == {
            "days_worked",
            "total_hours",
            "approved_hours",
            "pending_hours",
            "total_earnings",
            "entry_count",
            "pending_count",
        }


class TestGrouping:
    """Test per-employee and weekly summaries."""

    def test_by_employee(self):
        alice, bob = uuid4(), uuid4()
        entries = [
            Entry("09:00", "17:00", Decimal("8"), Decimal("160"), True, alice),
            Entry("09:00", "12:00", Decimal("3"), Decimal("60"), False, alice),
            Entry("10:00", "11:00", Decimal("1"), Decimal("18.50"), False, bob),
        ]
        result = summarize_by_employee(entries)

        assert result[alice].total_hours == Decimal("11")
        assert result[bob].pending_hours == Decimal("1")

    def test_week(self):
        entries = [
            Entry("09:00", "17:00", Decimal("8"), Decimal("160"), True, work_date=date(2024, 3, 11)),
            Entry("09:00", "17:00", Decimal("8"), Decimal("160"), True, work_date=date(2024, 3, 17)),
            Entry("09:00", "17:00", Decimal("8"), Decimal("160"), True, work_date=date(2024, 3, 18)),
        ]
        summary = summarize_week(entries, date(2024, 3, 13))
        assert summary.days_worked == 2
        assert summary.total_hours == Decimal("16")
