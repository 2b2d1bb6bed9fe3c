from fastapi import APIRouter, HTTPException
from app.config.permissions_config import ROLES, get_permission_matrix, permissions_for_role

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("")
async def get_permissions():
    """Role -> permission table used to show or hide actions in the UI"""
    return get_permission_matrix()


@router.get("/{role}")
async def get_role_permissions(role: str):
    if role not in ROLES:
        raise HTTPException(status_code=404, detail="Role not found")
    return {"role": role, "permissions": permissions_for_role(role)}
