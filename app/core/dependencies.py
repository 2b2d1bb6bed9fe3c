"""
Core dependencies for authentication and project permission checking
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config.permissions_config import has_permission
from app.database.supabase_client import SupabaseClientFactory, get_client_factory
from app.modules.auth.service import AuthService
from app.modules.projects.service import ProjectService
from supabase import Client
from typing import Callable, Dict
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

DENIED_MESSAGES = {
    "VIEW_PROJECT": "You don't have permission to view this project",
    "EDIT_PROJECT": "You don't have permission to edit this project",
    "DELETE_PROJECT": "You don't have permission to delete this project",
    "VIEW_TASKS": "You don't have permission to view tasks in this project",
    "CREATE_TASK": "You don't have permission to add tasks to this project",
    "EDIT_TASK": "You don't have permission to edit this task",
    "DELETE_TASK": "You don't have permission to delete this task",
    "VIEW_MEMBERS": "You don't have permission to view members of this project",
    "INVITE_MEMBER": "You don't have permission to invite members to this project. Only owners and admins can add members.",
    "REMOVE_MEMBER": "You don't have permission to remove members from this project. Only owners and admins can remove members.",
    "MANAGE_ADMINS": "Only project owners can grant or revoke owner and admin roles.",
}


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_anon_supabase(factory: SupabaseClientFactory = Depends(get_client_factory)) -> Client:
    return factory.anon()


def get_supabase(
    token: str = Depends(get_current_token),
    factory: SupabaseClientFactory = Depends(get_client_factory)
) -> Client:
    """Supabase client acting as the caller, so row-level security applies"""
    return factory.for_token(token)


def get_admin_client_provider(
    factory: SupabaseClientFactory = Depends(get_client_factory)
) -> Callable[[], Client]:
    """Lazy service-role client; only resolved when an admin call is actually made"""
    return factory.service


def get_auth_service(
    supabase: Client = Depends(get_anon_supabase),
    admin_client: Callable[[], Client] = Depends(get_admin_client_provider)
) -> AuthService:
    return AuthService(supabase, admin_client)


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def ensure_role_permission(role: str, permission: str):
    """Raise 403 unless ``role`` grants ``permission``"""
    if not has_permission(role, permission):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=DENIED_MESSAGES.get(permission, f"Insufficient permissions. Required: {permission}")
        )


def check_project_permission(
    project_id: str,
    permission: str,
    user_data: dict,
    supabase: Client
) -> str:
    """Return the caller's role in the project, raising 404 for non-members and 403 when the role falls short"""
    role = ProjectService(supabase).get_user_role(project_id, user_data["id"])
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    try:
        ensure_role_permission(role, permission)
    except HTTPException:
        logger.info("Denied %s on project %s for %s (role %s)", permission, project_id, user_data["id"], role)
        raise
    return role


def require_project_permission(required_permission: str):
    """Factory function to create a project permission check dependency (route must take project_id)"""
    def check_permission(
        project_id: str,
        user_data: dict = Depends(get_current_user),
        supabase: Client = Depends(get_supabase)
    ) -> Dict:
        role = check_project_permission(project_id, required_permission, user_data, supabase)
        return {**user_data, "project_role": role}
    return check_permission
