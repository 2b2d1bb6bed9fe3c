"""
Translation of Supabase/PostgREST failures into HTTP errors.

Row-level security hides rows instead of failing, so a write that matches no
row comes back with an empty ``data`` list. Services treat that as a denial:
the caller supplied the id, so the row is assumed to exist.
"""

import logging

from fastapi import HTTPException, status
from supabase import PostgrestAPIError

logger = logging.getLogger(__name__)

RLS_VIOLATION_CODE = "42501"
UNIQUE_VIOLATION_CODE = "23505"

LAST_OWNER_MESSAGE = "Cannot remove the last owner of a project. Transfer ownership first."


def not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def permission_denied(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def last_owner() -> HTTPException:
    return conflict(LAST_OWNER_MESSAGE)


def is_rls_violation(exc: Exception) -> bool:
    if not isinstance(exc, PostgrestAPIError):
        return False
    message = (exc.message or "").lower()
    return exc.code == RLS_VIOLATION_CODE or "row-level security" in message or "policy" in message


def is_unique_violation(exc: Exception) -> bool:
    return isinstance(exc, PostgrestAPIError) and exc.code == UNIQUE_VIOLATION_CODE


def translate_error(exc: Exception, action: str, denied_detail: str) -> HTTPException:
    """Map an exception raised while performing ``action`` to the HTTPException to raise."""
    if isinstance(exc, HTTPException):
        return exc
    if is_rls_violation(exc):
        return permission_denied(denied_detail)
    if isinstance(exc, PostgrestAPIError) and "last owner" in (exc.message or "").lower():
        return last_owner()
    logger.exception("Failed to %s: %s", action, exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}")
