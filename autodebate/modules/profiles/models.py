# Supabase tables: profiles, user_cars (current cars for the community listing)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- username: text (nullable)
- avatar_url: text (nullable) - public URL in the avatars bucket
- bio: text (nullable)
- birth_date: date (nullable)
- city: text (nullable)
- country: text (nullable)
- points: integer (default: 0)
- level: integer (default: 1)
- privacy_settings: jsonb (nullable) - {show_cars, show_activity, show_location}; missing key means visible
- social_links: jsonb (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

One row per authenticated identity. Mutated by the owner or an admin, never
deleted through the API.
"""
