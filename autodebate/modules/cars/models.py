# Supabase tables: user_cars, user_favorite_cars
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_cars:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null) - owner
- make: text (not null)
- model: text (not null)
- year: integer (nullable)
- description: text (nullable)
- is_current: boolean (default: true) - shown in the garage and community listing
- created_at: timestamp (default: now())
- updated_at: timestamp

user_favorite_cars:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- make: text (not null)
- model: text (not null)
- year: integer (nullable)
- created_at: timestamp (default: now())

Car photos are rows in photos with user_car_id set (see modules/photos).
"""
