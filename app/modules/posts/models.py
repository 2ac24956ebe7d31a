# Supabase table: posts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

posts:
- id: uuid (primary key)
- author_id: uuid (foreign key to users.id, not null) - immutable
- content: text (not null)
- images: text[] (default: '{}')
- ride_id: uuid (foreign key to rides.id, nullable) - removed with the ride by retention cleanup
- club_id: uuid (foreign key to clubs.id, nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (nullable)
"""
