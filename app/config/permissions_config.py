"""
Project Roles and Permissions Configuration
This config defines the per-project permission matrix for membership roles.
Used by route dependencies to reject requests early and by the frontend (via
/permissions) to hide actions a role cannot perform. Row-level security in
Supabase remains the authoritative check.
"""
from typing import Dict, List, Optional

# Membership roles, highest privilege first
ROLES = ["owner", "admin", "editor", "viewer"]

ALL_ROLES = frozenset(ROLES)
TASK_WRITERS = frozenset(["owner", "admin", "editor"])
MEMBER_MANAGERS = frozenset(["owner", "admin"])
OWNER_ONLY = frozenset(["owner"])

PERMISSIONS: Dict[str, frozenset] = {
    "VIEW_PROJECT": ALL_ROLES,
    "EDIT_PROJECT": OWNER_ONLY,
    "DELETE_PROJECT": OWNER_ONLY,
    "VIEW_TASKS": ALL_ROLES,
    "CREATE_TASK": TASK_WRITERS,
    "EDIT_TASK": TASK_WRITERS,
    "DELETE_TASK": TASK_WRITERS,
    "VIEW_MEMBERS": ALL_ROLES,
    "INVITE_MEMBER": MEMBER_MANAGERS,
    "REMOVE_MEMBER": MEMBER_MANAGERS,
    "MANAGE_ADMINS": OWNER_ONLY,
}

PERMISSION_DESCRIPTIONS = {
    "VIEW_PROJECT": "View project details",
    "EDIT_PROJECT": "Rename or re-describe the project",
    "DELETE_PROJECT": "Delete the project and all of its tasks",
    "VIEW_TASKS": "View tasks",
    "CREATE_TASK": "Add tasks",
    "EDIT_TASK": "Edit tasks and toggle completion",
    "DELETE_TASK": "Delete tasks",
    "VIEW_MEMBERS": "View project members",
    "INVITE_MEMBER": "Invite members",
    "REMOVE_MEMBER": "Remove members",
    "MANAGE_ADMINS": "Grant or revoke owner and admin roles",
}

# Roles that only MANAGE_ADMINS may hand out or take away
PRIVILEGED_ROLES = frozenset(["owner", "admin"])


def has_permission(role: Optional[str], permission: str) -> bool:
    """True iff role is in the permission's allowed set. Unknown role or permission is False."""
    allowed = PERMISSIONS.get(permission)
    if allowed is None or role is None:
        return False
    return role in allowed


def permissions_for_role(role: Optional[str]) -> List[str]:
    return sorted(name for name in PERMISSIONS if has_permission(role, name))


def get_permission_matrix():
    """
    Returns the permission table in a form the frontend can consume
    Format: {
        "roles": ["owner", "admin", "editor", "viewer"],
        "permissions": [
            {"name": "VIEW_PROJECT", "description": "...", "roles": ["owner", ...]},
            ...
        ]
    }
    """
    permissions = []
    for name, allowed in PERMISSIONS.items():
        permissions.append({
            "name": name,
            "description": PERMISSION_DESCRIPTIONS[name],
            # keep role order stable, highest privilege first
            "roles": [role for role in ROLES if role in allowed]
        })

    return {
        "roles": list(ROLES),
        "permissions": permissions
    }

