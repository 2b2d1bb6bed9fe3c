from fastapi import APIRouter, Depends
from app.config.permissions_config import permissions_for_role
from app.core.dependencies import get_current_user, get_supabase, require_project_permission
from app.modules.profiles.service import ProfileService
from app.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectWithStatsResponse, ProjectRoleResponse
)
from app.modules.projects.service import ProjectService
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_service(supabase: Client = Depends(get_supabase)) -> ProjectService:
    return ProjectService(supabase)


@router.get("", response_model=List[ProjectWithStatsResponse])
async def list_projects(
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Projects the caller owns or belongs to, with task and member counts"""
    return service.list_projects_for_user(user_data["id"])


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
    supabase: Client = Depends(get_supabase)
):
    """Create a project owned by the caller"""
    # membership rows reference profiles, so the owner needs one first
    ProfileService(supabase).ensure_profile(user_data)
    return service.create_project(project_data, user_data["id"])


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    user_data: Dict = Depends(require_project_permission("VIEW_PROJECT")),
    service: ProjectService = Depends(get_project_service)
):
    return service.get_project(project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    user_data: Dict = Depends(require_project_permission("EDIT_PROJECT")),
    service: ProjectService = Depends(get_project_service)
):
    """Update project (owners only)"""
    return service.update_project(project_id, project_data)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    user_data: Dict = Depends(require_project_permission("DELETE_PROJECT")),
    service: ProjectService = Depends(get_project_service)
):
    """Delete project with its tasks and memberships (owners only)"""
    service.delete_project(project_id)
    return None


@router.get("/{project_id}/role", response_model=ProjectRoleResponse)
async def get_my_role(
    project_id: str,
    user_data: Dict = Depends(require_project_permission("VIEW_PROJECT"))
):
    """Caller's role in the project and what it allows (for UI gating)"""
    role = user_data["project_role"]
    return ProjectRoleResponse(project_id=project_id, role=role, permissions=permissions_for_role(role))
