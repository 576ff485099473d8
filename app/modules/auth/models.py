# Supabase tables: users, user_roles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id)
- organization_id: uuid (foreign key to organizations.id, not null)
- email: text (not null)
- full_name: text (nullable)
- is_active: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to users.id, not null, unique) - a user holds exactly one role
- role_id: uuid (foreign key to roles.id, not null)
- assigned_by: uuid (foreign key to users.id, nullable)
- created_at: timestamp (default: now())

Note: Authentication data (password, tokens) is stored in auth.users table
managed by Supabase Auth.
"""
