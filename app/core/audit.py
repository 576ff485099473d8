"""
Append-only audit trail (rbac_audit_logs).
Write operations call AuditLogger.record before returning success; a failed
audit insert fails the request.
"""

import logging
from typing import Any, Dict, Optional

from supabase import Client

from app.core.permissions import UserContext
from app.core.safe_fetch import insert_one

logger = logging.getLogger(__name__)

AUDIT_TABLE = "rbac_audit_logs"


class AuditLogger:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record(
        self,
        actor: UserContext,
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        old_value: Optional[Dict[str, Any]] = None,
        new_value: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        entry = insert_one(self.supabase, AUDIT_TABLE, {
            "organization_id": actor.organization_id,
            "user_id": actor.user_id,
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "old_value": old_value,
            "new_value": new_value,
        }, "Audit log entry")
        logger.info(f"audit {action} {resource_type}:{resource_id} by {actor.user_id}")
        return entry
