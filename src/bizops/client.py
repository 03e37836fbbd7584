"""Async HTTP client for the bizops API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar
from uuid import UUID

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from bizops.api.schemas import (
    BulkApprovalResponse,
    EmployeeListResponse,
    EmployeeResponse,
    OkResponse,
    OrderResponse,
    TimeEntryListResponse,
    TimeEntryResponse,
    TimeEntrySaveResponse,
    TimeSummaryResponse,
)
from bizops.errors import BizOpsError
from bizops.services.approval import ApprovalResult, BulkApprovalReport
from bizops.session import SessionContext

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Status codes meaning the bulk endpoint is not available on the server
_BULK_UNSUPPORTED = {404, 405, 501}


class ApiError(BizOpsError):
    """Raised for a non-2xx response or an unreadable payload.

    ``status_code`` is 0 when no response arrived at all.
    """

    code = "API_ERROR"

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = "http://localhost:8000"
    timeout: float = 10.0


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get("error")
        if isinstance(message, str) and message:
            return message
    return fallback


def _params(**values: Any) -> dict[str, str]:
    params = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        else:
            params[key] = str(value)
    return params


class BizOpsClient:
    """Thin typed wrapper over the HTTP API.

    Headers come from ``session_ctx`` on every request, so a tenant switch
    applies to the next call. Requests are never retried.
    """

    def __init__(
        self,
        session_ctx: SessionContext,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.session_ctx = session_ctx
        self.config = config or ClientConfig()
        self._http = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> BizOpsClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        fallback: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        self.session_ctx.require_tenant()
        try:
            response = await self._http.request(
                method,
                path,
                params=params,
                json=json,
                headers=self.session_ctx.auth_headers(),
            )
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(0, fallback) from exc
        if response.is_error:
            message = _error_message(response, fallback)
            logger.warning("%s %s failed (%d): %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        return response

    @staticmethod
    def _parse(response: httpx.Response, model: type[ModelT]) -> ModelT:
        try:
            return model.model_validate(response.json())
        except (ValueError, PydanticValidationError):
            raise ApiError(response.status_code, "Malformed response") from None

    # ------------------------------------------------------------------
    # Time entries
    # ------------------------------------------------------------------

    async def list_time_entries(
        self,
        employee_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        approved: bool | None = None,
    ) -> list[TimeEntryResponse]:
        response = await self._request(
            "GET",
            "/api/time-entries",
            "Failed to load time entries",
            params=_params(employee_id=employee_id, approved=approved, **{"from": date_from, "to": date_to}),
        )
        return self._parse(response, TimeEntryListResponse).items

    async def save_time_entry(
        self,
        employee_id: UUID,
        work_date: date,
        entry_id: UUID | None = None,
        **fields: str | None,
    ) -> TimeEntrySaveResponse:
        """Create or update an entry.

        Only the keyword fields passed (``start_time``, ``end_time``,
        ``notes``) are sent; pass ``None`` to clear one.
        """
        body: dict[str, Any] = {"employee_id": str(employee_id), "work_date": work_date.isoformat()}
        if entry_id is not None:
            body["id"] = str(entry_id)
        body.update(fields)
        response = await self._request("POST", "/api/time-entries", "Save failed", json=body)
        return self._parse(response, TimeEntrySaveResponse)

    async def delete_time_entry(self, entry_id: UUID) -> None:
        response = await self._request(
            "DELETE",
            "/api/time-entries",
            "Delete failed",
            params={"id": str(entry_id)},
        )
        self._parse(response, OkResponse)

    async def time_summary(
        self,
        employee_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> TimeSummaryResponse:
        response = await self._request(
            "GET",
            "/api/time-entries/summary",
            "Failed to load summary",
            params=_params(employee_id=employee_id, **{"from": date_from, "to": date_to}),
        )
        return self._parse(response, TimeSummaryResponse)

    # ------------------------------------------------------------------
    # Approval
    # ------------------------------------------------------------------

    async def approve_time_entry(self, entry_id: UUID, approved_by: str) -> TimeEntryResponse:
        response = await self._request(
            "POST",
            "/api/time-entries-approve",
            "Approval failed",
            json={"id": str(entry_id), "approved": True, "approved_by": approved_by},
        )
        return self._parse(response, TimeEntryResponse)

    async def unapprove_time_entry(self, entry_id: UUID) -> TimeEntryResponse:
        response = await self._request(
            "POST",
            "/api/time-entries-approve",
            "Unapprove failed",
            json={"id": str(entry_id), "approved": False},
        )
        return self._parse(response, TimeEntryResponse)

    async def bulk_approve(self, entry_ids: list[UUID], approved_by: str) -> BulkApprovalReport:
        """Approve several entries.

        Uses the bulk endpoint; if the server does not offer it, approves
        one by one and collects the same per-item results.
        """
        try:
            response = await self._request(
                "POST",
                "/api/time-entries-approve/bulk",
                "Bulk approval failed",
                json={"ids": [str(i) for i in entry_ids], "approved_by": approved_by},
            )
        except ApiError as exc:
            if exc.status_code not in _BULK_UNSUPPORTED:
                raise
            return await self._approve_one_by_one(entry_ids, approved_by)

        parsed = self._parse(response, BulkApprovalResponse)
        return BulkApprovalReport(
            results=[ApprovalResult(r.id, r.success, r.error) for r in parsed.results]
        )

    async def _approve_one_by_one(
        self, entry_ids: list[UUID], approved_by: str
    ) -> BulkApprovalReport:
        report = BulkApprovalReport()
        for entry_id in dict.fromkeys(entry_ids):
            try:
                await self.approve_time_entry(entry_id, approved_by)
            except ApiError as exc:
                report.results.append(ApprovalResult(entry_id, False, exc.message))
            else:
                report.results.append(ApprovalResult(entry_id, True))
        return report

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def get_order(self, order_id: UUID) -> OrderResponse:
        response = await self._request(
            "GET",
            "/api/order",
            "Failed to load order",
            params={"id": str(order_id)},
        )
        return self._parse(response, OrderResponse)

    # ------------------------------------------------------------------
    # Employees
    # ------------------------------------------------------------------

    async def list_employees(
        self, active: bool | None = None, refresh: bool = False
    ) -> list[EmployeeResponse]:
        """Employees of the active tenant, cached until the session changes.

        A response that arrives after a login, tenant switch or logout is
        returned but not cached.
        """
        key = f"employees:{active}"
        if not refresh and key in self.session_ctx.cache:
            return self.session_ctx.cache[key]

        generation = self.session_ctx.generation
        response = await self._request(
            "GET",
            "/api/employees",
            "Failed to load employees",
            params=_params(active=active),
        )
        employees = self._parse(response, EmployeeListResponse).items
        if self.session_ctx.generation == generation:
            self.session_ctx.cache[key] = employees
        return employees
