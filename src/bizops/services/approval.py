"""Time entry approval state machine and service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizops.errors import (
    BizOpsError,
    EntryLockedError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from bizops.models import ApprovalStatus, TimeEntry, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class ApprovalStateMachine:
    """State machine for time entry approval.

    Allowed transitions:
    - pending → approved
    - approved → pending (unapprove)

    Repeating the current state is a no-op, not a transition.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        ApprovalStatus.PENDING: [ApprovalStatus.APPROVED],
        ApprovalStatus.APPROVED: [ApprovalStatus.PENDING],
    }

    # Entries in these statuses may be edited or deleted
    EDITABLE = {ApprovalStatus.PENDING}

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
    def is_editable(cls, status: str) -> bool:
        return status in cls.EDITABLE


def approve(entry: TimeEntry, approver_id: str | None, now: datetime | None = None) -> bool:
    """Approve a pending entry.

    Returns False, leaving the stamp untouched, when the entry is already
    approved.
    """
    if approver_id is None or not str(approver_id).strip():
        raise ValidationError("approved_by is required when approving", field="approved_by")

    if entry.approval_status == ApprovalStatus.APPROVED:
        return False

    ApprovalStateMachine.validate_transition(entry.approval_status, ApprovalStatus.APPROVED)
    entry.approved = True
    entry.approved_by = str(approver_id).strip()
    entry.approved_at = now or utcnow()
    return True


def unapprove(entry: TimeEntry) -> bool:
    """Return an approved entry to pending; False if it already was."""
    if entry.approval_status == ApprovalStatus.PENDING:
        return False

    ApprovalStateMachine.validate_transition(entry.approval_status, ApprovalStatus.PENDING)
    entry.approved = False
    entry.approved_by = None
    entry.approved_at = None
    return True


def ensure_editable(entry: TimeEntry, action: str = "edit") -> None:
    """Raise EntryLockedError if the entry may not be changed."""
    if not ApprovalStateMachine.is_editable(entry.approval_status):
        raise EntryLockedError(entry.time_entry_id, action)


@dataclass(frozen=True)
class ApprovalResult:
    """Outcome for one id in a bulk approval."""

    id: UUID
    success: bool
    error: str | None = None


@dataclass
class BulkApprovalReport:
    """Per-item results of a bulk approval, in request order."""

    results: list[ApprovalResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[UUID]:
        return [r.id for r in self.results if r.success]

    @property
    def failed(self) -> list[ApprovalResult]:
        return [r for r in self.results if not r.success]

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


class ApprovalService:
    """Applies approval transitions to stored time entries."""

    def __init__(self, session: AsyncSession):
        self.session = session

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

    async def set_approval(
        self,
        tenant_id: UUID,
        entry_id: UUID,
        approved: bool,
        approved_by: str | None = None,
        now: datetime | None = None,
    ) -> TimeEntry:
        """Approve or unapprove one entry.

        Raises:
            NotFoundError: entry missing or owned by another tenant
            ValidationError: approving without an approver
        """
        entry = await self.get_entry(tenant_id, entry_id)
        if approved:
            changed = approve(entry, approved_by, now)
        else:
            changed = unapprove(entry)

        if changed:
            logger.info(
                "Time entry %s %s by %s",
                entry_id,
                "approved" if approved else "unapproved",
                approved_by,
            )
            await self.session.flush()
        return entry

    async def bulk_approve(
        self,
        tenant_id: UUID,
        entry_ids: Iterable[UUID],
        approved_by: str | None,
        now: datetime | None = None,
    ) -> BulkApprovalReport:
        """Approve each id independently.

        A failing id is recorded and the loop moves on; entries approved
        before it stay approved. Duplicate ids are processed once.
        """
        report = BulkApprovalReport()
        stamp = now or utcnow()
        seen: set[UUID] = set()

        for entry_id in entry_ids:
            if entry_id in seen:
                continue
            seen.add(entry_id)
            try:
                entry = await self.get_entry(tenant_id, entry_id)
                approve(entry, approved_by, stamp)
            except BizOpsError as exc:
                logger.warning("Bulk approval failed for %s: %s", entry_id, exc)
                report.results.append(ApprovalResult(entry_id, False, str(exc)))
            else:
                report.results.append(ApprovalResult(entry_id, True))

        if report.success_count:
            await self.session.flush()
        logger.info(
            "Bulk approval: %d approved, %d failed",
            report.success_count,
            report.failure_count,
        )
        return report
