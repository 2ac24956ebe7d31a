# Supabase table: reports
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

reports:
- id: uuid (primary key)
- reporter_id: uuid (foreign key to users.id, nullable) - set null when the reporter is deleted
- type: text (not null) - RIDE, CLUB, LISTING, POST, USER
- title: text (not null)
- description: text (nullable)
- reported_item_id: text (nullable)
- reported_item_name: text (nullable)
- status: text (not null, default: 'PENDING') - PENDING, REVIEWING, RESOLVED, DISMISSED
- priority: text (not null, default: 'MEDIUM') - LOW, MEDIUM, HIGH
- resolution: text (nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (nullable)
"""
