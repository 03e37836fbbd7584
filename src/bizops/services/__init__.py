"""bizops services."""

from bizops.services.approval import (
    ApprovalResult,
    ApprovalService,
    ApprovalStateMachine,
    BulkApprovalReport,
)
from bizops.services.delivery import (
    DeliveryStatus,
    SupplierOrderStateMachine,
    SupplierOrderStatus,
    resolve_status,
)
from bizops.services.directory import DirectoryService, EmployeeInput, next_employee_code
from bizops.services.orders import OrderInput, OrderService, OrderView, PartnerSplitInput
from bizops.services.supplier_orders import (
    SupplierLineInput,
    SupplierOrderInput,
    SupplierOrderService,
)
from bizops.services.time_entries import UNSET, TimeEntryService

__all__ = [
    "ApprovalResult",
    "ApprovalService",
    "ApprovalStateMachine",
    "BulkApprovalReport",
    "DeliveryStatus",
    "DirectoryService",
    "EmployeeInput",
    "OrderInput",
    "OrderService",
    "OrderView",
    "PartnerSplitInput",
    "SupplierLineInput",
    "SupplierOrderInput",
    "SupplierOrderService",
    "SupplierOrderStateMachine",
    "SupplierOrderStatus",
    "TimeEntryService",
    "UNSET",
    "next_employee_code",
    "resolve_status",
]
