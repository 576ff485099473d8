from supabase import Client
from app.core.audit import AUDIT_TABLE
from app.core.errors import ValidationFault
from app.core.permissions import UserContext
from app.core.safe_fetch import execute
from app.modules.audit_logs.schemas import AuditLogResponse
from typing import List, Optional

MAX_PAGE_SIZE = 200


class AuditLogService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_logs(
        self,
        actor: UserContext,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[AuditLogResponse]:
        """List audit entries of the caller's organization, newest first"""
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationFault(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if offset < 0:
            raise ValidationFault("offset must not be negative")
        query = self.supabase.table(AUDIT_TABLE)\
            .select("*")\
            .eq("organization_id", actor.organization_id)
        if action:
            query = query.eq("action", action)
        if resource_type:
            query = query.eq("resource_type", resource_type)
        if user_id:
            query = query.eq("user_id", user_id)
        query = query.order("created_at", desc=True)\
            .limit(limit)\
            .offset(offset)
        return [AuditLogResponse(**row) for row in execute(query, "Failed to list audit logs")]
