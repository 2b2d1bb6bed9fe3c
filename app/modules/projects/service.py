import logging
from collections import Counter
from supabase import Client
from app.core.errors import is_unique_violation, not_found, permission_denied, translate_error
from app.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectWithStatsResponse
)
from typing import Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_projects_for_user(self, user_id: str) -> List[ProjectWithStatsResponse]:
        """Projects the user owns or is a member of, oldest first, with task and member counts"""
        try:
            owned_result = self.supabase.table("projects")\
                .select("*")\
                .eq("owner_id", user_id)\
                .order("created_at")\
                .execute()

            memberships_result = self.supabase.table("project_members")\
                .select("project_id, role")\
                .eq("profile_id", user_id)\
                .execute()
            roles = {m["project_id"]: m["role"] for m in memberships_result.data or []}

            member_projects = []
            if roles:
                member_result = self.supabase.table("projects")\
                    .select("*")\
                    .in_("id", list(roles))\
                    .execute()
                member_projects = member_result.data or []

            # A project the user owns and is also a member of shows up in both lists
            projects: Dict[str, dict] = {}
            for project in (owned_result.data or []) + member_projects:
                projects.setdefault(project["id"], project)
            if not projects:
                return []

            project_ids = list(projects)
            tasks_result = self.supabase.table("tasks")\
                .select("project_id, completed")\
                .in_("project_id", project_ids)\
                .execute()
            members_result = self.supabase.table("project_members")\
                .select("project_id")\
                .in_("project_id", project_ids)\
                .execute()
        except Exception as e:
            raise translate_error(e, "load projects", "You don't have permission to view these projects")

        total_tasks = Counter(t["project_id"] for t in tasks_result.data or [])
        completed_tasks = Counter(t["project_id"] for t in tasks_result.data or [] if t.get("completed"))
        member_counts = Counter(m["project_id"] for m in members_result.data or [])

        stats = []
        for project_id, project in projects.items():
            # owner_id alone grants nothing once the creator's membership is gone
            role = roles.get(project_id)
            if role is None:
                continue
            stats.append(ProjectWithStatsResponse(
                **project,
                total_tasks=total_tasks[project_id],
                completed_tasks=completed_tasks[project_id],
                member_count=member_counts[project_id],
                user_role=role,
                is_owner=role == "owner"
            ))
        stats.sort(key=lambda p: p.created_at)
        return stats

    def get_project(self, project_id: str) -> ProjectResponse:
        """Get project by ID"""
        try:
            result = self.supabase.table("projects")\
                .select("*")\
                .eq("id", project_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_error(e, "fetch project", "You don't have permission to view this project")
        if not result.data:
            raise not_found("Project not found")
        return ProjectResponse(**result.data[0])

    def create_project(self, project_data: ProjectCreate, owner_id: str) -> ProjectResponse:
        """Create a project and make the creator its owner"""
        try:
            result = self.supabase.table("projects").insert({
                "title": project_data.title.strip(),
                "description": project_data.description,
                "owner_id": owner_id
            }).execute()
        except Exception as e:
            raise translate_error(e, "create project", "You don't have permission to create projects")
        if not result.data:
            raise permission_denied("You don't have permission to create projects")

        project = ProjectResponse(**result.data[0])
        try:
            self._add_owner(project.id, owner_id)
        except Exception as e:
            # Undo the project insert so no project is left without an owner
            self._discard_project(project.id)
            if isinstance(e, HTTPException):
                raise
            raise translate_error(e, "create project", "You don't have permission to create projects")
        return project

    def _add_owner(self, project_id: str, owner_id: str):
        try:
            result = self.supabase.table("project_members").insert({
                "project_id": project_id,
                "profile_id": owner_id,
                "role": "owner"
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                # already added by a database trigger
                return
            raise
        if not result.data:
            raise permission_denied("You don't have permission to create projects")

    def _discard_project(self, project_id: str):
        try:
            self.supabase.table("projects")\
                .delete()\
                .eq("id", project_id)\
                .execute()
        except Exception as e:
            logger.error("Failed to discard project %s after owner assignment failed: %s", project_id, e)

    def update_project(self, project_id: str, project_data: ProjectUpdate) -> ProjectResponse:
        """Update project"""
        update_data = project_data.model_dump(exclude_unset=True)
        if update_data.get("title") is not None:
            update_data["title"] = update_data["title"].strip()
        elif "title" in update_data:
            del update_data["title"]
        if not update_data:
            return self.get_project(project_id)

        try:
            result = self.supabase.table("projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .execute()
        except Exception as e:
            raise translate_error(e, "update project", "You don't have permission to edit this project")
        if not result.data:
            raise permission_denied("You don't have permission to edit this project")
        return ProjectResponse(**result.data[0])

    def delete_project(self, project_id: str) -> bool:
        """Delete project; tasks and memberships are removed by cascade"""
        try:
            result = self.supabase.table("projects")\
                .delete()\
                .eq("id", project_id)\
                .execute()
        except Exception as e:
            raise translate_error(e, "delete project", "You don't have permission to delete this project")
        if not result.data:
            raise permission_denied("You don't have permission to delete this project")
        return True

    def get_user_role(self, project_id: str, user_id: str) -> Optional[str]:
        """Caller's membership role, or None when the project is not visible to them"""
        try:
            result = self.supabase.table("project_members")\
                .select("role")\
                .eq("project_id", project_id)\
                .eq("profile_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_error(e, "load project role", "You don't have permission to view this project")
        if result.data:
            return result.data[0]["role"]
        return None
