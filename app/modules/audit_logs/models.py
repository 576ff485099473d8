# Supabase table: rbac_audit_logs
# This file documents the expected database schema
# Rows are written by app.core.audit.AuditLogger and never updated or deleted

"""
Expected Supabase table structure:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, nullable)
- user_id: uuid (foreign key to users.id, nullable) - the actor
- action: text (not null) - e.g. "role.update", "customer.delete"
- resource_type: text (not null) - e.g. "role", "customer"
- resource_id: uuid (nullable)
- old_value: jsonb (nullable)
- new_value: jsonb (nullable)
- created_at: timestamp (default: now())
"""
