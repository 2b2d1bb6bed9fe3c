import logging
from supabase import Client
from app.core.errors import (
    conflict, is_unique_violation, last_owner, not_found, permission_denied, translate_error
)
from app.modules.members.schemas import (
    MemberInvite, MemberResponse, MemberWithProfileResponse
)
from app.modules.profiles.service import ProfileService
from typing import List

logger = logging.getLogger(__name__)

INVITE_DENIED = "You don't have permission to invite members to this project. Only owners and admins can add members."
REMOVE_DENIED = "You don't have permission to remove members from this project. Only owners and admins can remove members."
UPDATE_DENIED = "You don't have permission to update member roles in this project. Only owners and admins can modify roles."


class MemberService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_members(self, project_id: str) -> List[MemberWithProfileResponse]:
        """Members of a project in join order, with their profile fields"""
        try:
            members_result = self.supabase.table("project_members")\
                .select("*")\
                .eq("project_id", project_id)\
                .order("joined_at")\
                .execute()
            members = members_result.data or []
            if not members:
                return []

            profile_ids = list({m["profile_id"] for m in members})
            profiles_result = self.supabase.table("profiles")\
                .select("id, username, email, avatar_url")\
                .in_("id", profile_ids)\
                .execute()
        except Exception as e:
            raise translate_error(e, "load members", "You don't have permission to view members of this project")

        profiles = {p["id"]: p for p in profiles_result.data or []}
        result = []
        for member in members:
            profile = profiles.get(member["profile_id"], {})
            result.append(MemberWithProfileResponse(
                **member,
                username=profile.get("username") or "Unknown",
                email=profile.get("email") or "Unknown",
                avatar_url=profile.get("avatar_url")
            ))
        return result

    def get_member(self, project_id: str, member_id: str) -> MemberResponse:
        try:
            result = self.supabase.table("project_members")\
                .select("*")\
                .eq("id", member_id)\
                .eq("project_id", project_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_error(e, "fetch member", "You don't have permission to view members of this project")
        if not result.data:
            raise not_found("Member not found")
        return MemberResponse(**result.data[0])

    def invite_member(self, project_id: str, invite: MemberInvite) -> MemberResponse:
        """Add an existing user, found by email, to the project"""
        profile = ProfileService(self.supabase).get_profile_by_email(invite.email)
        if profile is None:
            raise not_found("User not found with this email address")

        try:
            existing = self.supabase.table("project_members")\
                .select("id")\
                .eq("project_id", project_id)\
                .eq("profile_id", profile.id)\
                .limit(1)\
                .execute()
            if existing.data:
                raise conflict("User is already a member of this project")

            result = self.supabase.table("project_members").insert({
                "project_id": project_id,
                "profile_id": profile.id,
                "role": invite.role
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise conflict("User is already a member of this project")
            raise translate_error(e, "invite member", INVITE_DENIED)
        if not result.data:
            raise permission_denied(INVITE_DENIED)

        logger.info("Added %s to project %s as %s", profile.id, project_id, invite.role)
        return MemberResponse(**result.data[0])

    def remove_member(self, project_id: str, member_id: str) -> bool:
        """Remove a membership; the project's last owner cannot be removed"""
        member = self.get_member(project_id, member_id)
        if member.role == "owner" and self._count_owners(project_id) <= 1:
            raise last_owner()

        try:
            result = self.supabase.table("project_members")\
                .delete()\
                .eq("id", member_id)\
                .eq("project_id", project_id)\
                .execute()
        except Exception as e:
            raise translate_error(e, "remove member", REMOVE_DENIED)
        if not result.data:
            raise permission_denied(REMOVE_DENIED)
        return True

    def update_member_role(self, project_id: str, member_id: str, role: str) -> MemberResponse:
        member = self.get_member(project_id, member_id)
        if member.role == role:
            return member
        if member.role == "owner" and self._count_owners(project_id) <= 1:
            raise last_owner()

        try:
            result = self.supabase.table("project_members")\
                .update({"role": role})\
                .eq("id", member_id)\
                .eq("project_id", project_id)\
                .execute()
        except Exception as e:
            raise translate_error(e, "update member role", UPDATE_DENIED)
        if not result.data:
            raise permission_denied(UPDATE_DENIED)
        return MemberResponse(**result.data[0])

    def _count_owners(self, project_id: str) -> int:
        try:
            result = self.supabase.table("project_members")\
                .select("id")\
                .eq("project_id", project_id)\
                .eq("role", "owner")\
                .execute()
        except Exception as e:
            raise translate_error(e, "check project owners", REMOVE_DENIED)
        return len(result.data or [])
