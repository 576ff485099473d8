# Supabase table: customers
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- organization_id: uuid (foreign key to organizations.id, not null)
- name: text (not null)
- phone: text (not null)
- email: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Every query carries organization_id; a customer of another organization is
indistinguishable from a missing one.
"""
