# Supabase tables: permissions, user_permission_overrides
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

permissions (catalog, seeded from app/config/permissions_config.py):
- id: uuid (primary key)
- key: text (not null, unique) - "resource.action", e.g. "customers.delete"
- resource: text (not null) - e.g. "customers"
- action: text (not null) - e.g. "delete"
- category: text (not null) - general | operations | financial | reports | administration
- description: text (nullable)
- display_order: integer (not null)
- is_active: boolean (default: true)
- created_at: timestamp (default: now())

user_permission_overrides:
- id: uuid (primary key)
- user_id: uuid (foreign key to users.id, not null, on delete cascade)
- permission_id: uuid (foreign key to permissions.id, not null, on delete cascade)
- is_granted: boolean (not null) - true grants outside the role, false denies inside it
- reason: text (nullable)
- granted_by: uuid (foreign key to users.id, nullable)
- expires_at: timestamptz (nullable) - ignored once in the past
- created_at: timestamp (default: now())
- unique constraint on (user_id, permission_id)

Display names come from the translation key permissions.details.<key>.name.
"""
