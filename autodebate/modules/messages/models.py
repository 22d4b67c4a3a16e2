# Supabase tables: conversations, messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

conversations:
- id: uuid (primary key)
- participant_1: uuid (foreign key to profiles.id, not null)
- participant_2: uuid (foreign key to profiles.id, not null)
- last_message_at: timestamp (nullable) - conversations are listed newest first
- created_at: timestamp (default: now())

messages:
- id: uuid (primary key)
- conversation_id: uuid (foreign key to conversations.id, on delete cascade)
- sender_id: uuid (foreign key to profiles.id)
- content: text (not null)
- message_type: text (default: 'text')
- read_at: timestamp (nullable) - set when the other participant opens the conversation
- created_at: timestamp (default: now())

Realtime: inserts into messages are pushed on "conversation-<conversation_id>".
"""
