from datetime import datetime, timezone
from supabase import Client
from app.core.audit import AuditLogger
from app.core.errors import ValidationFault
from app.core.permissions import UserContext
from app.core.safe_fetch import delete_one, execute, fetch_one, insert_one, update_one
from app.modules.customers.schemas import (
    CustomerCreate, CustomerUpdate, CustomerResponse, CustomerListResponse
)

MAX_PAGE_SIZE = 100
# NOT NULL columns; an explicit null in an update is rejected before the store is touched
REQUIRED_FIELDS = ("name", "phone")


class CustomerService:
    def __init__(self, supabase: Client, audit: AuditLogger):
        self.supabase = supabase
        self.audit = audit

    def _scope(self, customer_id: str, actor: UserContext) -> dict:
        return {"id": customer_id, "organization_id": actor.organization_id}

    def list_customers(self, actor: UserContext, limit: int = 20, offset: int = 0) -> CustomerListResponse:
        """List the organization's customers, newest first"""
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationFault(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if offset < 0:
            raise ValidationFault("offset must not be negative")
        # One extra row tells whether another page exists
        rows = execute(
            self.supabase.table("customers")
            .select("*")
            .eq("organization_id", actor.organization_id)
            .order("created_at", desc=True)
            .limit(limit + 1)
            .offset(offset),
            "Failed to list customers"
        )
        return CustomerListResponse(
            data=[CustomerResponse(**c) for c in rows[:limit]],
            has_more=len(rows) > limit
        )

    def get_customer(self, customer_id: str, actor: UserContext) -> CustomerResponse:
        """Get customer by ID"""
        return CustomerResponse(**fetch_one(self.supabase, "customers", self._scope(customer_id, actor), "Customer"))

    def create_customer(self, customer_data: CustomerCreate, actor: UserContext) -> CustomerResponse:
        """Create a customer in the caller's organization"""
        values = customer_data.model_dump()
        values["organization_id"] = actor.organization_id
        row = insert_one(self.supabase, "customers", values, "Customer")
        self.audit.record(actor, "customer.create", "customer", row["id"], new_value=customer_data.model_dump())
        return CustomerResponse(**row)

    def update_customer(self, customer_id: str, customer_data: CustomerUpdate, actor: UserContext) -> CustomerResponse:
        """Update customer; zero matched rows means missing or another organization's"""
        changes = customer_data.model_dump(exclude_unset=True)
        cleared = [field for field in REQUIRED_FIELDS if field in changes and changes[field] is None]
        if cleared:
            raise ValidationFault(f"{', '.join(cleared)} cannot be null")
        if not changes:
            return self.get_customer(customer_id, actor)
        values = dict(changes, updated_at=datetime.now(timezone.utc).isoformat())
        row = update_one(self.supabase, "customers", values, self._scope(customer_id, actor), "Customer")
        self.audit.record(actor, "customer.update", "customer", customer_id, new_value=changes)
        return CustomerResponse(**row)

    def delete_customer(self, customer_id: str, actor: UserContext) -> None:
        """Delete customer"""
        row = delete_one(self.supabase, "customers", self._scope(customer_id, actor), "Customer")
        self.audit.record(
            actor, "customer.delete", "customer", customer_id,
            old_value={k: row.get(k) for k in ("name", "phone", "email")}
        )
