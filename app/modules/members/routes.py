from fastapi import APIRouter, Depends
from app.config.permissions_config import PRIVILEGED_ROLES
from app.core.dependencies import ensure_role_permission, get_supabase, require_project_permission
from app.modules.members.schemas import (
    MemberInvite, MemberRoleUpdate, MemberResponse, MemberWithProfileResponse
)
from app.modules.members.service import MemberService
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/projects/{project_id}/members", tags=["members"])


def get_member_service(supabase: Client = Depends(get_supabase)) -> MemberService:
    return MemberService(supabase)


@router.get("", response_model=List[MemberWithProfileResponse])
async def list_members(
    project_id: str,
    user_data: Dict = Depends(require_project_permission("VIEW_MEMBERS")),
    service: MemberService = Depends(get_member_service)
):
    return service.list_members(project_id)


@router.post("", response_model=MemberResponse, status_code=201)
async def invite_member(
    project_id: str,
    invite: MemberInvite,
    user_data: Dict = Depends(require_project_permission("INVITE_MEMBER")),
    service: MemberService = Depends(get_member_service)
):
    """Invite an existing user by email (owners and admins; owner/admin roles need an owner)"""
    if invite.role in PRIVILEGED_ROLES:
        ensure_role_permission(user_data["project_role"], "MANAGE_ADMINS")
    return service.invite_member(project_id, invite)


@router.put("/{member_id}", response_model=MemberResponse)
async def update_member_role(
    project_id: str,
    member_id: str,
    role_update: MemberRoleUpdate,
    user_data: Dict = Depends(require_project_permission("INVITE_MEMBER")),
    service: MemberService = Depends(get_member_service)
):
    """Change a member's role (owners and admins; owner/admin roles need an owner)"""
    member = service.get_member(project_id, member_id)
    if role_update.role in PRIVILEGED_ROLES or member.role in PRIVILEGED_ROLES:
        ensure_role_permission(user_data["project_role"], "MANAGE_ADMINS")
    return service.update_member_role(project_id, member_id, role_update.role)


@router.delete("/{member_id}", status_code=204)
async def remove_member(
    project_id: str,
    member_id: str,
    user_data: Dict = Depends(require_project_permission("REMOVE_MEMBER")),
    service: MemberService = Depends(get_member_service)
):
    """Remove a member (owners and admins; removing an owner or admin needs an owner)"""
    member = service.get_member(project_id, member_id)
    if member.role in PRIVILEGED_ROLES and member.profile_id != user_data["id"]:
        ensure_role_permission(user_data["project_role"], "MANAGE_ADMINS")
    service.remove_member(project_id, member_id)
    return None
