# Supabase table: tasks
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

tasks:
- id: uuid (primary key, default: gen_random_uuid())
- project_id: uuid (not null, references projects.id on delete cascade)
- title: text (not null)
- description: text (nullable)
- completed: boolean (not null, default: false)
- created_at: timestamp (default: now())

RLS policies:
- select: any member of the project
- insert / update / delete: members with role owner, admin or editor
"""
