# Supabase tables: clubs, club_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

clubs:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- image: text (nullable)
- is_public: boolean (not null, default: true)
- verified: boolean (not null, default: false)
- owner_id: uuid (foreign key to users.id, not null) - immutable; treated as FOUNDER
  even when no club_members row exists for them
- created_at: timestamptz (default: now())
- updated_at: timestamptz (nullable)

club_members:
- id: uuid (primary key)
- club_id: uuid (foreign key to clubs.id on delete cascade, not null)
- user_id: uuid (foreign key to users.id, not null)
- role: text (not null, default: 'MEMBER') - values: MEMBER, OFFICER, ADMIN, FOUNDER
- joined_at: timestamptz (default: now())
- unique constraint on (club_id, user_id)

FOUNDER rows are only removed together with the club.
"""
