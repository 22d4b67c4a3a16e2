# Supabase tables: achievements, user_achievements, user_activity_log, profiles (points, level)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

achievements:
- id: uuid (primary key)
- name: text (not null)
- description: text (not null)
- icon: text (nullable)
- type: text (not null) - e.g. photos, forum, community
- points: integer (nullable) - awarded when earned
- requirements: jsonb (nullable)
- created_at: timestamp (default: now())

user_achievements:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- achievement_id: uuid (foreign key to achievements.id, not null)
- earned_at: timestamp (default: now())
- unique constraint on (user_id, achievement_id)

user_activity_log:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- activity_type: text (not null) - key of POINTS_BY_ACTIVITY or "achievement"
- points: integer (nullable)
- related_id: uuid (nullable)
- related_type: text (nullable)
- created_at: timestamp (default: now())
"""
