from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.audit_logs.schemas import AuditLogResponse
from app.modules.audit_logs.service import AuditLogService
from app.core.dependencies import require_permission
from app.core.permissions import UserContext
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/audit-logs", tags=["audit-logs"])


def get_audit_log_service(supabase: Client = Depends(get_service_supabase)) -> AuditLogService:
    return AuditLogService(supabase)


@router.get("", response_model=List[AuditLogResponse])
async def list_audit_logs(
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    context: UserContext = Depends(require_permission("audit_logs.view")),
    service: AuditLogService = Depends(get_audit_log_service)
):
    """Read-only audit trail of the caller's organization"""
    return service.list_logs(
        context, action=action, resource_type=resource_type, user_id=user_id,
        limit=limit, offset=offset
    )
