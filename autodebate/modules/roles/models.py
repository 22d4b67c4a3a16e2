# Supabase tables: user_roles, role_change_log
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- role: app_role enum ('general', 'copiloto', 'admin')
- created_at: timestamp (default: now())
- unique constraint on (user_id, role)

role_change_log:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id) - whose roles changed
- role: app_role
- action: text ('added' | 'removed')
- performed_by: uuid (foreign key to profiles.id)
- created_at: timestamp (default: now())

Writes go through the service-role client; RLS only lets admins read other
users' role rows.
"""
