from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.customers.schemas import (
    CustomerCreate, CustomerUpdate, CustomerResponse, CustomerListResponse
)
from app.modules.customers.service import CustomerService
from app.core.audit import AuditLogger
from app.core.dependencies import require_permission
from app.core.permissions import UserContext
from supabase import Client

router = APIRouter(prefix="/customers", tags=["customers"])


def get_customer_service(supabase: Client = Depends(get_service_supabase)) -> CustomerService:
    return CustomerService(supabase, AuditLogger(supabase))


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    limit: int = 20,
    offset: int = 0,
    context: UserContext = Depends(require_permission("customers.view")),
    service: CustomerService = Depends(get_customer_service)
):
    """List customers"""
    return service.list_customers(context, limit=limit, offset=offset)


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(
    customer_data: CustomerCreate,
    context: UserContext = Depends(require_permission("customers.create")),
    service: CustomerService = Depends(get_customer_service)
):
    """Create a new customer"""
    return service.create_customer(customer_data, context)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: str,
    context: UserContext = Depends(require_permission("customers.view")),
    service: CustomerService = Depends(get_customer_service)
):
    """Get customer by ID"""
    return service.get_customer(customer_id, context)


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: str,
    customer_data: CustomerUpdate,
    context: UserContext = Depends(require_permission("customers.update")),
    service: CustomerService = Depends(get_customer_service)
):
    """Update customer"""
    return service.update_customer(customer_id, customer_data, context)


@router.delete("/{customer_id}", status_code=204)
async def delete_customer(
    customer_id: str,
    context: UserContext = Depends(require_permission("customers.delete")),
    service: CustomerService = Depends(get_customer_service)
):
    """Delete customer"""
    service.delete_customer(customer_id, context)
    return None
