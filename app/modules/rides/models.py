# Supabase tables: rides, ride_participants
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py and lifecycle.py

"""
Expected Supabase table structure:

rides:
- id: uuid (primary key)
- title: text (not null)
- description: text (nullable)
- start_location: text (not null)
- end_location: text (nullable)
- experience_level, pace: text (nullable)
- xp_required: integer (nullable)
- distance: double precision (nullable)
- duration: integer (nullable) - minutes
- scheduled_at: timestamptz (nullable) - rides without it never auto-start
- ends_at: timestamptz (nullable) - scheduled_at + duration (or the default duration), kept in
  sync on create/update so the completion check is a plain column filter
- started_at, ended_at, cancelled_at: timestamptz (nullable) - set by the transition that enters the state
- status: text (not null, default: 'PLANNED') - values: PLANNED, IN_PROGRESS, COMPLETED, CANCELLED
- keep_permanently: boolean (not null, default: false)
- creator_id: uuid (foreign key to users.id, not null) - immutable owner
- club_id: uuid (foreign key to clubs.id, nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (nullable)
- index on (status, scheduled_at), (status, ends_at), (status, ended_at)

ride_participants:
- id: uuid (primary key)
- ride_id: uuid (foreign key to rides.id on delete cascade, not null)
- user_id: uuid (foreign key to users.id, not null)
- status: text (not null, default: 'ACCEPTED') - values: REQUESTED, ACCEPTED, DECLINED, COMPLETED, CANCELLED
- joined_at: timestamptz (default: now())
- unique constraint on (ride_id, user_id)
"""
