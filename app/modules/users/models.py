# Supabase table: users (profile rows keyed by auth.users.id)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id)
- email: text (unique, not null) - synced from auth.users
- username: text (unique, nullable)
- display_name: text (nullable)
- avatar_url: text (nullable)
- bio: text (nullable)
- role: text (nullable) - legacy single role, see app/modules/roles/models.py
- rides_completed: integer (not null, default: 0) - maintained by the
  update_user_statistics job
- created_at: timestamptz (default: now())
- updated_at: timestamptz (nullable)

Platform roles live in user_role_assignments, not here.
"""
