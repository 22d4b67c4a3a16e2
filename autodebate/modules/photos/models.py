# Supabase tables: photos, photo_likes, photo_favorites
# Storage buckets: gallery (originals, signed URLs), gallery-thumbs (public thumbnails)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

photos:
- id: uuid (primary key)
- storage_path: text (not null) - key in the gallery bucket
- thumbnail_path: text (nullable) - key in the gallery-thumbs bucket
- caption: text (nullable)
- tags: text[] (nullable)
- specs: jsonb (nullable) - string-keyed string map, e.g. {"engine": "2JZ"}
- likes_count: integer (default: 0)
- favorites_count: integer (default: 0)
- uploaded_by: uuid (foreign key to profiles.id, not null)
- event_id: uuid (foreign key to events.id, nullable) - set for event gallery photos
- user_car_id: uuid (foreign key to user_cars.id, nullable) - set for car gallery photos
- is_thumbnail: boolean (default: false) - at most max_event_thumbnails per event / car
- created_at: timestamp (default: now())
- updated_at: timestamp

photo_likes / photo_favorites:
- id: uuid (primary key)
- photo_id: uuid (foreign key to photos.id, not null)
- user_id: uuid (foreign key to profiles.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (photo_id, user_id)

Storage keys: <uploader_id>/<event_id or car_id>/<epoch_ms>_<filename>
"""
