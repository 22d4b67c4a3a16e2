# Supabase tables: blog_posts, comments
# Storage bucket: blog-images (public featured images)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

blog_posts:
- id: uuid (primary key)
- title: text (not null)
- content: text (not null)
- excerpt: text (nullable)
- featured_image: text (nullable) - public URL in the blog-images bucket
- published: boolean (default: false) - drafts are visible to admins only
- author_id: uuid (foreign key to profiles.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp

comments:
- id: uuid (primary key)
- blog_post_id: uuid (foreign key to blog_posts.id, on delete cascade)
- author_id: uuid (foreign key to profiles.id, not null)
- content: text (not null)
- created_at: timestamp (default: now())
"""
