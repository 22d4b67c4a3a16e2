# Supabase tables: groups, group_members, group_messages, group_posts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- avatar_url: text (nullable)
- theme: text (nullable) - e.g. "jdm", "muscle", "classics"
- is_private: boolean (default: false) - private groups are joined by invitation only
- member_count: integer (default: 0)
- created_by: uuid (foreign key to profiles.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp

group_members:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, on delete cascade)
- user_id: uuid (foreign key to profiles.id)
- role: text ('admin' | 'member', default: 'member')
- joined_at: timestamp (default: now())
- unique constraint on (group_id, user_id)

group_messages:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, on delete cascade)
- sender_id: uuid (foreign key to profiles.id)
- content: text (not null)
- message_type: text (default: 'text')
- created_at: timestamp (default: now())

group_posts:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, on delete cascade)
- author_id: uuid (foreign key to profiles.id)
- title: text (nullable)
- content: text (not null)
- likes_count: integer (default: 0)
- comments_count: integer (default: 0)
- created_at: timestamp (default: now())

Realtime: inserts into group_messages and group_posts are pushed on the
channel "group-<group_id>".
"""
