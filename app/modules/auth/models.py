# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table), username kept in user_metadata
# - Password and Google (OAuth) sign-in, session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.sign_in_with_oauth() - Build the Google redirect URL
- auth.get_user() - Get current user from JWT token
- auth.admin.sign_out() - Revoke the caller's refresh tokens
- auth.admin.update_user_by_id() - Password / metadata changes (service role)

The application-side profile row is provisioned from the auth user on first
sign-in (see profiles.service.ProfileService.ensure_profile).
"""
