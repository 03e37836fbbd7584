"""Supplier order API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from bizops.api.dependencies import DbSession, TenantId, require_id
from bizops.api.schemas import (
    ErrorResponse,
    IdRequest,
    LastCostResponse,
    OkResponse,
    SupplierOrderCreate,
    SupplierOrderItemResponse,
    SupplierOrderResponse,
    SupplierOrderSavedResponse,
    SupplierOrderUpdate,
    SupplierStatusRequest,
)
from bizops.models import SupplierOrder
from bizops.services.delivery import SupplierOrderStatus
from bizops.services.supplier_orders import (
    SupplierLineInput,
    SupplierOrderInput,
    SupplierOrderService,
)

router = APIRouter(prefix="/order-supplier", tags=["supplier-orders"])


def _supplier_input(payload: SupplierOrderCreate) -> SupplierOrderInput:
    return SupplierOrderInput(
        supplier_id=payload.supplier_id,
        items=[
            SupplierLineInput(
                product_id=line.product_id,
                qty=line.qty,
                product_cost=line.product_cost,
                shipping_cost=line.shipping_cost,
            )
            for line in payload.items
        ],
        order_date=payload.order_date,
        est_delivery_date=payload.est_delivery_date,
        notes=payload.notes,
        status=payload.status,
        delivered=payload.delivered,
        in_customs=payload.in_customs,
        received=payload.received,
        delivery_date=payload.delivery_date,
        in_customs_date=payload.in_customs_date,
        received_date=payload.received_date,
    )


def _supplier_response(order: SupplierOrder) -> SupplierOrderResponse:
    flags = SupplierOrderStatus(order.status).to_flags()
    return SupplierOrderResponse(
        id=order.supplier_order_id,
        order_no=order.order_no,
        supplier_id=order.supplier_id,
        order_date=order.order_date,
        est_delivery_date=order.est_delivery_date,
        status=order.status,
        delivery_date=order.delivery_date,
        in_customs_date=order.in_customs_date,
        received_date=order.received_date,
        notes=order.notes,
        items=[SupplierOrderItemResponse.model_validate(i) for i in order.items],
        **flags,
    )


@router.get(
    "",
    response_model=SupplierOrderResponse | LastCostResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_supplier_order(
    db: DbSession,
    tenant_id: TenantId,
    order_id: Annotated[UUID | None, Query(alias="id")] = None,
    fn: str | None = None,
    supplier_id: UUID | None = None,
    product_id: UUID | None = None,
) -> SupplierOrderResponse | LastCostResponse:
    """Get one supplier order, or with ``fn=last-cost`` the latest line cost."""
    service = SupplierOrderService(db)
    if fn == "last-cost":
        if supplier_id is None or product_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="supplier_id and product_id are required",
            )
        cost = await service.last_cost(tenant_id, supplier_id, product_id)
        return LastCostResponse(product_cost=cost)

    if order_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="id is required",
        )
    order = await service.get(tenant_id, order_id)
    return _supplier_response(order)


@router.post(
    "",
    response_model=SupplierOrderSavedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_supplier_order(
    db: DbSession,
    tenant_id: TenantId,
    payload: SupplierOrderCreate,
) -> SupplierOrderSavedResponse:
    order = await SupplierOrderService(db).create(tenant_id, _supplier_input(payload))
    response = SupplierOrderSavedResponse(id=order.supplier_order_id, order_no=order.order_no)
    await db.commit()
    return response


@router.put(
    "",
    response_model=SupplierOrderSavedResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_supplier_order(
    db: DbSession,
    tenant_id: TenantId,
    payload: SupplierOrderUpdate,
) -> SupplierOrderSavedResponse:
    order = await SupplierOrderService(db).update(tenant_id, payload.id, _supplier_input(payload))
    response = SupplierOrderSavedResponse(id=order.supplier_order_id, order_no=order.order_no)
    await db.commit()
    return response


@router.delete(
    "",
    response_model=OkResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_supplier_order(
    db: DbSession,
    tenant_id: TenantId,
    order_id: Annotated[UUID | None, Query(alias="id")] = None,
    payload: IdRequest | None = None,
) -> OkResponse:
    await SupplierOrderService(db).delete(tenant_id, require_id(order_id, payload))
    await db.commit()
    return OkResponse()


@router.post(
    "/status",
    response_model=SupplierOrderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_supplier_order_status(
    db: DbSession,
    tenant_id: TenantId,
    payload: SupplierStatusRequest,
) -> SupplierOrderResponse:
    """Move a supplier order along its status lifecycle."""
    order = await SupplierOrderService(db).set_status(
        tenant_id, payload.id, payload.status, payload.on_date
    )
    response = _supplier_response(order)
    await db.commit()
    return response
