# Supabase tables: users, user_role_assignments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id)
- role: text (nullable) - legacy single-role column; backfilled into
  user_role_assignments by app/scripts/backfill_user_roles.py and never read at request time

user_role_assignments:
- id: uuid (primary key)
- user_id: uuid (foreign key to users.id, not null)
- role: text (not null) - values: SUPER_ADMIN, ADMIN, CLUB_OWNER, SELLER, RIDER, USER
- assigned_at: timestamp (default: now())
- unique constraint on (user_id, role)

USER is implicit for every user and does not need a row.
"""
