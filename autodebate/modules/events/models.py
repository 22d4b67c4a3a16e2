# Supabase table: events
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

events:
- id: uuid (primary key)
- title: text (not null)
- description: text (nullable)
- event_date: date (not null)
- location: text (nullable)
- created_by: uuid (foreign key to profiles.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp

An event is the container of a photo gallery (photos.event_id).
"""
