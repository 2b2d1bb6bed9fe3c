import logging
from fastapi import APIRouter, Depends, Request
from app.core.dependencies import (
    get_auth_service, get_current_token, get_current_user, get_supabase
)
from app.database.supabase_client import SupabaseClientFactory, get_client_factory
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    ChangePasswordRequest, OAuthUrlResponse
)
from app.modules.auth.service import AuthService
from app.modules.profiles.service import ProfileService
from supabase import Client
from typing import Dict, Optional

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _provision_profile(factory: SupabaseClientFactory, service: AuthService, access_token: str):
    user_data = service.get_current_user(access_token)
    ProfileService(factory.for_token(access_token)).ensure_profile(user_data)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
    factory: SupabaseClientFactory = Depends(get_client_factory)
):
    """Register a new user; the profile is created now if no email confirmation is pending"""
    response = service.register(register_data)
    if response.access_token:
        _provision_profile(factory, service, response.access_token)
    return response


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    factory: SupabaseClientFactory = Depends(get_client_factory)
):
    """Login and get access token"""
    token = service.login(login_data)
    _provision_profile(factory, service, token.access_token)
    return token


@router.get("/google", response_model=OAuthUrlResponse)
async def google_sign_in(
    request: Request,
    redirect_to: Optional[str] = None,
    service: AuthService = Depends(get_auth_service)
):
    """URL to send the browser to for Google sign-in"""
    return service.google_sign_in_url(redirect_to or request.app.state.settings.oauth_redirect_url)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_current_user_info(
    current_user: Dict = Depends(get_current_user)
):
    """Get current authenticated user"""
    return current_user


@router.post("/change-password", status_code=200)
async def change_password(
    request: ChangePasswordRequest,
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    service.change_password(current_user["id"], request.new_password)
    return {"message": "Password updated successfully"}


@router.delete("/account", status_code=204)
async def delete_account(
    current_user: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase)
):
    """Delete the account, its profile and every project it owns"""
    logger.info("Deleting account %s", current_user["id"])
    ProfileService(supabase).delete_account()
    return None
