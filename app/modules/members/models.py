# Supabase table: project_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

project_members:
- id: uuid (primary key, default: gen_random_uuid())
- project_id: uuid (not null, references projects.id on delete cascade)
- profile_id: uuid (not null, references profiles.id on delete cascade)
- role: text (not null, check role in ('owner', 'admin', 'editor', 'viewer'))
- joined_at: timestamp (default: now())
- unique (project_id, profile_id)

RLS policies:
- select: any member of the same project
- insert: members with role owner or admin; or the project's owner_id adding
  themselves as 'owner' right after creating it
- update / delete: members with role owner or admin

A BEFORE DELETE trigger raises 'Cannot remove the last owner of a project'
when the deleted row is the project's only owner.
"""
