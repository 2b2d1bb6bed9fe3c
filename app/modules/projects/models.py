# Supabase table: projects
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

projects:
- id: uuid (primary key, default: gen_random_uuid())
- title: text (not null)
- description: text (nullable)
- owner_id: uuid (not null, references profiles.id) - creator; after creation
  ownership is carried by project_members.role = 'owner'
- created_at: timestamp (default: now())

RLS policies:
- select: caller has a project_members row for the project (or is owner_id)
- insert: owner_id = auth.uid()
- update / delete: caller's membership role is 'owner'; delete is also allowed
  for owner_id = auth.uid() while the project has no members (creation rollback)

Deleting a project cascades to tasks and project_members.
"""
