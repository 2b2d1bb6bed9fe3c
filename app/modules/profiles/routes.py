from fastapi import APIRouter, Depends, Query
from app.core.dependencies import get_admin_client_provider, get_current_user, get_supabase
from app.modules.profiles.schemas import ProfileResponse, ProfileUpdate
from app.modules.profiles.service import ProfileService
from supabase import Client
from typing import Callable, Dict, List

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(
    supabase: Client = Depends(get_supabase),
    admin_client: Callable[[], Client] = Depends(get_admin_client_provider)
) -> ProfileService:
    return ProfileService(supabase, admin_client)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Current user's profile, created on first access"""
    return service.ensure_profile(user_data)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    return service.update_profile(user_data["id"], profile_data)


@router.get("/search", response_model=List[ProfileResponse])
async def search_profiles(
    q: str = Query(min_length=1),
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Find users to invite by email or username"""
    return service.search_profiles(q)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    return service.get_profile(profile_id)
