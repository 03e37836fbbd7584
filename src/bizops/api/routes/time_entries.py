"""Time entry and approval API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from bizops.api.dependencies import ActingEmployeeId, DbSession, TenantId, require_id
from bizops.api.schemas import (
    ApprovalRequest,
    ApprovalResultItem,
    BulkApprovalRequest,
    BulkApprovalResponse,
    ClockRequest,
    ErrorResponse,
    IdRequest,
    OkResponse,
    TimeEntryListResponse,
    TimeEntryResponse,
    TimeEntrySave,
    TimeEntrySaveResponse,
    TimeSummaryResponse,
)
from bizops.models import TimeEntry
from bizops.services.approval import ApprovalService
from bizops.services.time_entries import UNSET, TimeEntryService

router = APIRouter(tags=["time-entries"])


def _entry_response(entry: TimeEntry, names: dict[UUID, str]) -> TimeEntryResponse:
    response = TimeEntryResponse.model_validate(entry)
    response.employee_name = names.get(entry.employee_id)
    return response


# ============================================================================
# Time entries
# ============================================================================


@router.get(
    "/time-entries",
    response_model=TimeEntryListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_time_entries(
    db: DbSession,
    tenant_id: TenantId,
    employee_id: UUID | None = None,
    date_from: Annotated[date | None, Query(alias="from")] = None,
    date_to: Annotated[date | None, Query(alias="to")] = None,
    approved: bool | None = None,
) -> TimeEntryListResponse:
    """List entries, newest work date first."""
    service = TimeEntryService(db)
    entries = await service.list_entries(tenant_id, employee_id, date_from, date_to, approved)
    names = await service.employee_names(tenant_id)
    return TimeEntryListResponse(
        items=[_entry_response(e, names) for e in entries],
        total=len(entries),
    )


@router.post(
    "/time-entries",
    response_model=TimeEntrySaveResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def save_time_entry(
    db: DbSession,
    tenant_id: TenantId,
    payload: TimeEntrySave,
) -> TimeEntrySaveResponse:
    """Create an entry, or update the one for the same employee and day."""
    sent = payload.model_fields_set
    entry, created = await TimeEntryService(db).save_entry(
        tenant_id,
        payload.employee_id,
        payload.work_date,
        start_time=payload.start_time if "start_time" in sent else UNSET,
        end_time=payload.end_time if "end_time" in sent else UNSET,
        notes=payload.notes if "notes" in sent else UNSET,
        entry_id=payload.id,
    )
    entry_id = entry.time_entry_id
    await db.commit()

    if created:
        return TimeEntrySaveResponse(id=entry_id, created=True)
    return TimeEntrySaveResponse(id=entry_id, updated=True)


@router.delete(
    "/time-entries",
    response_model=OkResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_time_entry(
    db: DbSession,
    tenant_id: TenantId,
    acting_employee_id: ActingEmployeeId,
    entry_id: Annotated[UUID | None, Query(alias="id")] = None,
    payload: IdRequest | None = None,
) -> OkResponse:
    """Delete a pending entry; the id comes as ``?id=`` or in the body."""
    await TimeEntryService(db).delete_entry(
        tenant_id, require_id(entry_id, payload), acting_employee_id
    )
    await db.commit()
    return OkResponse()


@router.get(
    "/time-entries/summary",
    response_model=TimeSummaryResponse,
    responses={400: {"model": ErrorResponse}},
)
async def time_entry_summary(
    db: DbSession,
    tenant_id: TenantId,
    employee_id: UUID | None = None,
    date_from: Annotated[date | None, Query(alias="from")] = None,
    date_to: Annotated[date | None, Query(alias="to")] = None,
) -> TimeSummaryResponse:
    """Hours and earnings over the filtered entries."""
    summary = await TimeEntryService(db).summary(tenant_id, employee_id, date_from, date_to)
    return TimeSummaryResponse(**summary.to_dict())


@router.post(
    "/time-entries/clock-in",
    response_model=TimeEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def clock_in(
    db: DbSession,
    tenant_id: TenantId,
    payload: ClockRequest,
) -> TimeEntryResponse:
    entry = await TimeEntryService(db).clock_in(tenant_id, payload.employee_id)
    response = TimeEntryResponse.model_validate(entry)
    await db.commit()
    return response


@router.post(
    "/time-entries/clock-out",
    response_model=TimeEntryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def clock_out(
    db: DbSession,
    tenant_id: TenantId,
    payload: ClockRequest,
) -> TimeEntryResponse:
    entry = await TimeEntryService(db).clock_out(tenant_id, payload.employee_id)
    response = TimeEntryResponse.model_validate(entry)
    await db.commit()
    return response


# ============================================================================
# Approval
# ============================================================================


@router.post(
    "/time-entries-approve",
    response_model=TimeEntryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def approve_time_entry(
    db: DbSession,
    tenant_id: TenantId,
    payload: ApprovalRequest,
) -> TimeEntryResponse:
    """Approve or unapprove one entry.

    Approving an approved entry, or unapproving a pending one, changes
    nothing.
    """
    entry = await ApprovalService(db).set_approval(
        tenant_id,
        payload.id,
        payload.approved,
        payload.approved_by,
    )
    response = TimeEntryResponse.model_validate(entry)
    await db.commit()
    return response


@router.post(
    "/time-entries-approve/bulk",
    response_model=BulkApprovalResponse,
    responses={400: {"model": ErrorResponse}},
)
async def bulk_approve_time_entries(
    db: DbSession,
    tenant_id: TenantId,
    payload: BulkApprovalRequest,
) -> BulkApprovalResponse:
    """Approve several entries; failures are reported per id."""
    report = await ApprovalService(db).bulk_approve(tenant_id, payload.ids, payload.approved_by)
    await db.commit()
    return BulkApprovalResponse(
        results=[
            ApprovalResultItem(id=r.id, success=r.success, error=r.error) for r in report.results
        ],
        success_count=report.success_count,
        failure_count=report.failure_count,
    )
