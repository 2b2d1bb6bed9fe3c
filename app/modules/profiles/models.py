# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id on delete cascade)
- username: text (not null)
- email: text (unique, not null, stored lower-case) - synced from auth.users
- avatar_url: text (nullable)
- created_at: timestamp (default: now())

RLS policies:
- select: any authenticated user (needed to resolve invitations by email)
- insert / update: only the row whose id = auth.uid()

delete_user_account() (security definer RPC):
- deletes the caller's auth.users row; profiles, owned projects, their tasks
  and memberships go with it through ON DELETE CASCADE
"""
