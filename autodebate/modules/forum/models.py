# Supabase tables: forum_categories, forum_threads, forum_replies, forum_reply_likes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

forum_categories:
- id: uuid (primary key)
- name: text (unique, not null)
- description: text (nullable)
- color: text (nullable) - hex color for the category badge
- icon: text (nullable)
- created_at: timestamp (default: now())

forum_threads:
- id: uuid (primary key)
- title: text (not null)
- content: text (not null)
- category_id: uuid (foreign key to forum_categories.id, nullable)
- author_id: uuid (foreign key to profiles.id, not null)
- pinned: boolean (default: false) - pinned threads are listed first
- created_at: timestamp (default: now())
- updated_at: timestamp

forum_replies:
- id: uuid (primary key)
- thread_id: uuid (foreign key to forum_threads.id, on delete cascade)
- author_id: uuid (foreign key to profiles.id, not null)
- content: text (not null)
- parent_reply_id: uuid (foreign key to forum_replies.id, nullable) - one level of nesting
- likes_count: integer (default: 0)
- created_at: timestamp (default: now())

forum_reply_likes:
- id: uuid (primary key)
- reply_id: uuid (foreign key to forum_replies.id, on delete cascade)
- user_id: uuid (foreign key to profiles.id)
- unique constraint on (reply_id, user_id)
"""
