import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from app.core.errors import is_unique_violation, not_found, permission_denied, translate_error
from app.modules.profiles.schemas import ProfileResponse, ProfileUpdate

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


def _default_username(user: Dict[str, Any]) -> str:
    metadata = user.get("user_metadata") or {}
    username = metadata.get("username") or metadata.get("full_name") or metadata.get("name")
    if username and username.strip():
        return username.strip()
    email = user.get("email") or ""
    return email.split("@")[0] or "user"


class ProfileService:
    def __init__(self, supabase: Client, admin_client: Optional[Callable[[], Client]] = None):
        self.supabase = supabase
        # Service-role client provider, used for auth metadata writes only
        self.admin_client = admin_client

    def _find_by_id(self, user_id: str) -> Optional[ProfileResponse]:
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return ProfileResponse(**result.data[0])

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get profile by ID"""
        try:
            profile = self._find_by_id(user_id)
        except Exception as e:
            raise translate_error(e, "fetch profile", "You don't have permission to view this profile")
        if profile is None:
            raise not_found("Profile not found")
        return profile

    def get_profile_by_email(self, email: str) -> Optional[ProfileResponse]:
        """Get profile by email; None when no account uses it"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("email", email.strip().lower())\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_error(e, "look up profile", "You don't have permission to look up profiles")
        if not result.data:
            return None
        return ProfileResponse(**result.data[0])

    def search_profiles(self, query: str) -> List[ProfileResponse]:
        """Case-insensitive match on email or username"""
        # PostgREST filter syntax uses these as separators
        term = "".join(ch for ch in query.strip() if ch not in ",()*%")
        if not term:
            return []
        try:
            result = self.supabase.table("profiles")\
                .select("id, username, email, avatar_url, created_at")\
                .or_(f"email.ilike.*{term}*,username.ilike.*{term}*")\
                .limit(SEARCH_LIMIT)\
                .execute()
        except Exception as e:
            raise translate_error(e, "search profiles", "You don't have permission to search profiles")
        return [ProfileResponse(**profile) for profile in result.data]

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update profile; a new username is mirrored into auth metadata when possible"""
        update_data = profile_data.model_dump(exclude_none=True)
        if "username" in update_data:
            update_data["username"] = update_data["username"].strip()
        if not update_data:
            return self.get_profile(user_id)
        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            raise translate_error(e, "update profile", "You don't have permission to edit this profile")
        if not result.data:
            raise permission_denied("You don't have permission to edit this profile")

        if "username" in update_data:
            self._sync_auth_username(user_id, update_data["username"])

        return ProfileResponse(**result.data[0])

    def _sync_auth_username(self, user_id: str, username: str):
        if self.admin_client is None:
            return
        try:
            self.admin_client().auth.admin.update_user_by_id(
                user_id,
                {"user_metadata": {"username": username}}
            )
        except Exception as e:
            # profile row is already updated; metadata is only a convenience copy
            logger.warning("Failed to update auth metadata for %s: %s", user_id, e)

    def ensure_profile(self, user: Dict[str, Any]) -> ProfileResponse:
        """Return the caller's profile, creating it on first sign-in"""
        user_id = user["id"]
        try:
            profile = self._find_by_id(user_id)
            if profile is not None:
                return profile

            logger.info("Provisioning profile for user %s", user_id)
            try:
                result = self.supabase.table("profiles").insert({
                    "id": user_id,
                    "username": _default_username(user),
                    "email": (user.get("email") or "").lower(),
                }).execute()
            except Exception as e:
                if not is_unique_violation(e):
                    raise
                # created concurrently by another request or a database trigger
                profile = self._find_by_id(user_id)
                if profile is None:
                    raise
                return profile

            if not result.data:
                raise permission_denied("You don't have permission to create this profile")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise translate_error(e, "create profile", "You don't have permission to create this profile")

    def delete_account(self) -> bool:
        """Delete the caller's account and everything it owns (server-side procedure)"""
        try:
            self.supabase.rpc("delete_user_account").execute()
        except Exception as e:
            raise translate_error(e, "delete account", "You don't have permission to delete this account")
        return True
