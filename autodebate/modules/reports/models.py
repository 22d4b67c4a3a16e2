# Supabase table: reports
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

reports:
- id: uuid (primary key)
- reporter_id: uuid (foreign key to profiles.id, not null)
- reported_content_type: text (not null) - 'photo' | 'forum_thread' | 'forum_reply' | 'comment' | 'group_post' | 'message' | 'profile'
- reported_content_id: uuid (not null)
- reason: text (not null)
- description: text (nullable)
- status: text ('pending' | 'resolved' | 'dismissed', default: 'pending')
- resolved_by: uuid (foreign key to profiles.id, nullable)
- resolved_at: timestamp (nullable)
- created_at: timestamp (default: now())
"""
