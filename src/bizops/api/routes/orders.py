"""Customer order API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from bizops.api.dependencies import DbSession, TenantId, require_id
from bizops.api.schemas import (
    DeliveryResponse,
    DeliveryUpdate,
    ErrorResponse,
    HistoricalCostsResponse,
    IdRequest,
    OkResponse,
    OrderCreate,
    OrderCreatedResponse,
    OrderFinancialsResponse,
    OrderResponse,
    OrderUpdate,
    PartnerSplitResponse,
)
from bizops.calculators.cost_history import CostHistoryResolver
from bizops.config import get_settings
from bizops.services.orders import OrderInput, OrderService, OrderView, PartnerSplitInput

router = APIRouter(tags=["orders"])


def _order_input(payload: OrderCreate) -> OrderInput:
    return OrderInput(
        customer_id=payload.customer_id,
        product_id=payload.product_id,
        qty=payload.qty,
        unit_price=payload.unit_price,
        order_date=payload.order_date,
        delivered=payload.delivered,
        delivered_quantity=payload.delivered_quantity,
        delivery_status=payload.delivery_status,
        notes=payload.notes,
        product_cost=payload.product_cost,
        shipping_cost=payload.shipping_cost,
        partner_splits=[
            PartnerSplitInput(
                partner_id=s.partner_id,
                amount_per_item=s.amount_per_item,
                amount=s.amount,
            )
            for s in payload.partner_splits
        ],
    )


def _order_response(view: OrderView) -> OrderResponse:
    order = view.order
    figures = view.financials.rounded()
    return OrderResponse(
        id=order.order_id,
        order_no=order.order_no,
        customer_id=order.customer_id,
        customer_name=view.customer_name,
        customer_type=view.customer_type,
        product_id=order.product_id,
        product_name=view.product_name,
        refund=view.refund,
        qty=order.qty,
        unit_price=order.unit_price,
        order_date=order.order_date,
        delivered=order.delivered,
        delivered_quantity=order.delivered_quantity,
        delivery_status=view.delivery_status.value,
        notes=order.notes,
        product_cost=order.product_cost,
        shipping_cost=order.shipping_cost,
        item_cost=order.item_cost,
        product_unit_cost=view.product_unit_cost,
        shipping_unit_cost=view.shipping_unit_cost,
        partner_splits=[PartnerSplitResponse.model_validate(s) for s in view.splits],
        financials=OrderFinancialsResponse(
            order_value=figures.order_value,
            partner_total=figures.partner_total,
            product_cost_total=figures.product_cost_total,
            shipping_cost_total=figures.shipping_cost_total,
            profit=figures.profit if figures.profit_visible else None,
            profit_percent=figures.profit_percent if figures.profit_visible else None,
            profit_visible=figures.profit_visible,
        ),
    )


@router.post(
    "/orders",
    response_model=OrderCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_order(
    db: DbSession,
    tenant_id: TenantId,
    payload: OrderCreate,
) -> OrderCreatedResponse:
    """Create a customer order."""
    order = await OrderService(db).create_order(tenant_id, _order_input(payload))
    response = OrderCreatedResponse(order_id=order.order_id, order_no=order.order_no)
    await db.commit()
    return response


@router.get(
    "/order",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_order(
    db: DbSession,
    tenant_id: TenantId,
    order_id: Annotated[UUID, Query(alias="id")],
) -> OrderResponse:
    """Get an order with its derived financials and delivery status."""
    view = await OrderService(db).get_order(tenant_id, order_id)
    return _order_response(view)


@router.put(
    "/order",
    response_model=OrderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_order(
    db: DbSession,
    tenant_id: TenantId,
    payload: OrderUpdate,
) -> OrderResponse:
    service = OrderService(db)
    await service.update_order(tenant_id, payload.id, _order_input(payload))
    view = await service.get_order(tenant_id, payload.id)
    response = _order_response(view)
    await db.commit()
    return response


@router.delete(
    "/order",
    response_model=OkResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_order(
    db: DbSession,
    tenant_id: TenantId,
    order_id: Annotated[UUID | None, Query(alias="id")] = None,
    payload: IdRequest | None = None,
) -> OkResponse:
    """Delete an order; the id comes in the body or as ``?id=``."""
    await OrderService(db).delete_order(tenant_id, require_id(order_id, payload))
    await db.commit()
    return OkResponse()


@router.put(
    "/orders-delivery",
    response_model=DeliveryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_order_delivery(
    db: DbSession,
    tenant_id: TenantId,
    payload: DeliveryUpdate,
) -> DeliveryResponse:
    """Set the delivered flag or the delivered quantity."""
    order = await OrderService(db).set_delivery(
        tenant_id,
        payload.id,
        delivered=payload.delivered,
        delivered_quantity=payload.delivered_quantity,
    )
    response = DeliveryResponse(
        id=order.order_id,
        delivered=order.delivered,
        delivered_quantity=order.delivered_quantity,
        delivery_status=order.delivery_status,
    )
    await db.commit()
    return response


@router.get(
    "/historical-costs",
    response_model=HistoricalCostsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def historical_costs(
    db: DbSession,
    tenant_id: TenantId,
    order_date: date,
    product_id: UUID | None = None,
    customer_id: UUID | None = None,
) -> HistoricalCostsResponse:
    """Product and shipping cost in effect at the end of ``order_date``."""
    resolver = CostHistoryResolver(db, get_settings().business_timezone)
    product_cost = None
    shipping_cost = None
    if product_id is not None:
        product_cost = await resolver.product_cost(product_id, order_date)
    if customer_id is not None:
        shipping_cost = await resolver.shipping_cost(tenant_id, customer_id, order_date)
    return HistoricalCostsResponse(product_cost=product_cost, shipping_cost=shipping_cost)
