import logging
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, OAuthUrlResponse
from fastapi import HTTPException
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


def user_to_dict(user) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "user_metadata": user.user_metadata or {},
        "app_metadata": user.app_metadata or {},
        "created_at": user.created_at,
        "updated_at": user.updated_at
    }


class AuthService:
    def __init__(self, supabase: Client, admin_client: Optional[Callable[[], Client]] = None):
        self.supabase = supabase
        self.admin_client = admin_client

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": {"username": register_data.username.strip()}
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            needs_confirmation = auth_response.session is None or not auth_response.user.email_confirmed_at
            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                needs_confirmation=needs_confirmation,
                message="Check your email to confirm your account" if needs_confirmation else "User registered successfully",
                access_token=None if auth_response.session is None else auth_response.session.access_token
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.exception("Registration failed: %s", e)
            raise HTTPException(status_code=500, detail="Registration failed")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid email or password")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                refresh_token=auth_response.session.refresh_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.exception("Login failed: %s", e)
            raise HTTPException(status_code=500, detail="Login failed")

    def google_sign_in_url(self, redirect_to: str) -> OAuthUrlResponse:
        """URL the browser must visit to start Google sign-in"""
        try:
            response = self.supabase.auth.sign_in_with_oauth({
                "provider": "google",
                "options": {"redirect_to": redirect_to}
            })
            return OAuthUrlResponse(provider="google", url=response.url)
        except Exception as e:
            logger.error("Google sign in error: %s", e)
            raise HTTPException(status_code=500, detail="Failed to start Google sign-in")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token"""
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            return user_to_dict(user_response.user)
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Revoke the session behind ``token``"""
        try:
            self.supabase.auth.admin.sign_out(token)
            return True
        except Exception as e:
            # Access tokens are stateless JWTs and expire on their own
            logger.warning("Sign out error: %s", e)
            return False

    def change_password(self, user_id: str, new_password: str) -> bool:
        """Set a new password (requires service role key)"""
        if self.admin_client is None:
            raise HTTPException(status_code=503, detail="Service role key not configured")
        try:
            response = self.admin_client().auth.admin.update_user_by_id(
                user_id,
                {"password": new_password}
            )
            if not response.user:
                raise HTTPException(status_code=404, detail="User not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.exception("Change password error: %s", e)
            raise HTTPException(status_code=500, detail="Failed to change password")
