# Supabase tables: roles, role_permissions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

roles:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, not null)
- key: text (not null) - e.g., "admin", "customer_service", "receptionist"
- color: text (nullable) - badge color for the admin UI
- description: text (nullable)
- is_system_role: boolean (default: false) - system roles cannot be deleted
- is_active: boolean (default: true) - inactive roles grant nothing
- created_by: uuid (foreign key to users.id, nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- unique constraint on (organization_id, key)

role_permissions:
- id: uuid (primary key)
- role_id: uuid (foreign key to roles.id, not null, on delete cascade)
- permission_id: uuid (foreign key to permissions.id, not null)
- granted_by: uuid (foreign key to users.id, nullable)
- created_at: timestamp (default: now())
- unique constraint on (role_id, permission_id)

Display names come from the translation key roles.<key>.name.
"""
