"""Employee, customer, product, partner and supplier endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from bizops.api.dependencies import DbSession, TenantId, require_id
from bizops.api.schemas import (
    CustomerCreate,
    CustomerResponse,
    EmployeeListResponse,
    EmployeeResponse,
    EmployeeSave,
    EmployeeSavedResponse,
    ErrorResponse,
    IdRequest,
    NamedCreate,
    NamedResponse,
    NextCodeResponse,
    OkResponse,
    ProductCostCreate,
    ProductCostResponse,
    ProductCreate,
)
from bizops.services.directory import DirectoryService, EmployeeInput

router = APIRouter(tags=["directory"])


# ============================================================================
# Employees
# ============================================================================


@router.get(
    "/employees",
    response_model=EmployeeListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_employees(
    db: DbSession,
    tenant_id: TenantId,
    active: bool | None = None,
) -> EmployeeListResponse:
    """List employees, active ones first."""
    employees = await DirectoryService(db).list_employees(tenant_id, active)
    return EmployeeListResponse(
        items=[EmployeeResponse.model_validate(e) for e in employees],
        total=len(employees),
    )


@router.get("/employees/next-code", response_model=NextCodeResponse)
async def next_employee_code(db: DbSession, tenant_id: TenantId) -> NextCodeResponse:
    code = await DirectoryService(db).next_employee_code(tenant_id)
    return NextCodeResponse(employee_code=code)


@router.post(
    "/employees",
    response_model=EmployeeSavedResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def save_employee(
    db: DbSession,
    tenant_id: TenantId,
    payload: EmployeeSave,
) -> EmployeeSavedResponse:
    """Create an employee, or update the fields sent for an existing one."""
    employee, created = await DirectoryService(db).save_employee(
        tenant_id,
        EmployeeInput(
            name=payload.name,
            employee_code=payload.employee_code,
            hourly_rate=payload.hourly_rate,
            active=payload.active,
        ),
        employee_id=payload.id,
    )
    response = EmployeeSavedResponse(
        id=employee.employee_id,
        employee_code=employee.employee_code,
        created=created,
    )
    await db.commit()
    return response


@router.delete(
    "/employees",
    response_model=OkResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def deactivate_employee(
    db: DbSession,
    tenant_id: TenantId,
    employee_id: Annotated[UUID | None, Query(alias="id")] = None,
    payload: IdRequest | None = None,
) -> OkResponse:
    """Deactivate an employee; nothing is removed."""
    await DirectoryService(db).deactivate_employee(tenant_id, require_id(employee_id, payload))
    await db.commit()
    return OkResponse()


# ============================================================================
# Customers
# ============================================================================


@router.get("/customers", response_model=list[CustomerResponse])
async def list_customers(
    db: DbSession,
    tenant_id: TenantId,
    q: str | None = None,
) -> list[CustomerResponse]:
    customers = await DirectoryService(db).list_customers(tenant_id, q)
    return [CustomerResponse.model_validate(c) for c in customers]


@router.post(
    "/customers",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_customer(
    db: DbSession,
    tenant_id: TenantId,
    payload: CustomerCreate,
) -> CustomerResponse:
    customer = await DirectoryService(db).create_customer(
        tenant_id, payload.name, payload.customer_type, payload.shipping_cost
    )
    response = CustomerResponse.model_validate(customer)
    await db.commit()
    return response


# ============================================================================
# Products
# ============================================================================


@router.get("/products", response_model=list[NamedResponse])
async def list_products(db: DbSession, tenant_id: TenantId) -> list[NamedResponse]:
    products = await DirectoryService(db).list_products(tenant_id)
    return [NamedResponse(id=p.product_id, name=p.name) for p in products]


@router.post(
    "/products",
    response_model=NamedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_product(
    db: DbSession,
    tenant_id: TenantId,
    payload: ProductCreate,
) -> NamedResponse:
    """Create a product, with its first unit cost when ``cost`` is sent."""
    product = await DirectoryService(db).create_product(
        tenant_id, payload.name, payload.cost, payload.effective_from
    )
    response = NamedResponse(id=product.product_id, name=product.name)
    await db.commit()
    return response


@router.get("/product-cost-history", response_model=list[ProductCostResponse])
async def product_cost_history(db: DbSession, tenant_id: TenantId) -> list[ProductCostResponse]:
    """Every cost change, by product name and newest first."""
    rows = await DirectoryService(db).product_cost_history(tenant_id)
    return [
        ProductCostResponse(
            product_id=row.product_id,
            product_name=name,
            cost=row.cost,
            effective_from=row.effective_from,
        )
        for row, name in rows
    ]


@router.post(
    "/product-cost-history",
    response_model=ProductCostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_product_cost(
    db: DbSession,
    tenant_id: TenantId,
    payload: ProductCostCreate,
) -> ProductCostResponse:
    row = await DirectoryService(db).add_product_cost(
        tenant_id, payload.product_id, payload.cost, payload.effective_from
    )
    response = ProductCostResponse(
        product_id=row.product_id,
        cost=row.cost,
        effective_from=row.effective_from,
    )
    await db.commit()
    return response


# ============================================================================
# Partners and suppliers
# ============================================================================


@router.get("/partners", response_model=list[NamedResponse])
async def list_partners(db: DbSession, tenant_id: TenantId) -> list[NamedResponse]:
    partners = await DirectoryService(db).list_partners(tenant_id)
    return [NamedResponse(id=p.partner_id, name=p.name) for p in partners]


@router.post(
    "/partners",
    response_model=NamedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_partner(
    db: DbSession,
    tenant_id: TenantId,
    payload: NamedCreate,
) -> NamedResponse:
    partner = await DirectoryService(db).create_partner(tenant_id, payload.name)
    response = NamedResponse(id=partner.partner_id, name=partner.name)
    await db.commit()
    return response


@router.get("/suppliers", response_model=list[NamedResponse])
async def list_suppliers(db: DbSession, tenant_id: TenantId) -> list[NamedResponse]:
    suppliers = await DirectoryService(db).list_suppliers(tenant_id)
    return [NamedResponse(id=s.supplier_id, name=s.name) for s in suppliers]


@router.post(
    "/suppliers",
    response_model=NamedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_supplier(
    db: DbSession,
    tenant_id: TenantId,
    payload: NamedCreate,
) -> NamedResponse:
    supplier = await DirectoryService(db).create_supplier(tenant_id, payload.name)
    response = NamedResponse(id=supplier.supplier_id, name=supplier.name)
    await db.commit()
    return response
