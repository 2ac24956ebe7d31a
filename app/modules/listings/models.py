# Supabase table: marketplace_listings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

marketplace_listings:
- id: uuid (primary key)
- seller_id: uuid (foreign key to users.id, not null) - immutable
- title: text (not null)
- description: text (nullable)
- price: numeric (not null)
- currency: text (not null, default: 'USD')
- category: text (nullable)
- condition: text (nullable) - NEW, LIKE_NEW, GOOD, FAIR, POOR
- images: text[] (default: '{}')
- location: text (nullable)
- is_sold: boolean (not null, default: false)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (nullable)
"""
