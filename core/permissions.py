# core/permissions.py

"""
Permission resolution.

A role's effective access is shaped as a *dense* matrix:

    {resource: {action: bool}}

pre-populated with every (resource, action) pair known system-wide,
defaulted to False, then overlaid with True for each permission the
role holds. Looking up any known pair always yields a defined bool,
and clients can do ``matrix.get(resource, {}).get(action) is True``
without scanning a list.
"""

import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from sqlmodel import Session, select

from models.permission import Permission
from models.role import RolePermission

PermissionMatrix = Dict[str, Dict[str, bool]]
PermissionPair = Tuple[str, str]


# ============================================
# DEFAULT PERMISSION CATALOG (seeded)
# ============================================
DEFAULT_PERMISSIONS: List[Dict[str, str]] = [
    # User management
    {"resource": "user", "action": "create", "description": "Create new users"},
    {"resource": "user", "action": "read", "description": "Read user information"},
    {"resource": "user", "action": "update", "description": "Update user information"},
    {"resource": "user", "action": "delete", "description": "Delete users"},

    # Role management
    {"resource": "role", "action": "create", "description": "Create new roles"},
    {"resource": "role", "action": "read", "description": "Read roles"},
    {"resource": "role", "action": "update", "description": "Rename roles"},
    {"resource": "role", "action": "delete", "description": "Delete roles"},

    # Permission management
    {"resource": "permission", "action": "create", "description": "Create new permissions"},
    {"resource": "permission", "action": "read", "description": "Read permission information"},
    {"resource": "permission", "action": "update", "description": "Update permissions"},
    {"resource": "permission", "action": "delete", "description": "Delete permissions"},
    {"resource": "permission", "action": "grant", "description": "Grant permissions to roles"},
    {"resource": "permission", "action": "revoke", "description": "Revoke permissions from roles"},
]

# Role name -> permission names granted by the seeder.
# The super admin role is granted every permission separately.
DEFAULT_ROLE_GRANTS: Dict[str, List[str]] = {
    "ADMIN": ["user.read", "user.update", "permission.read"],
    "USER": ["user.read"],
}


# ============================================
# MATRIX CONSTRUCTION
# ============================================
def build_permission_matrix(
    universe: Iterable[PermissionPair],
    granted: Iterable[PermissionPair],
) -> PermissionMatrix:
    """
    Two passes: every pair in ``universe`` -> False, then every pair in
    ``granted`` -> True. The result does not depend on input order.
    """
    matrix: PermissionMatrix = {}

    for resource, action in universe:
        matrix.setdefault(resource, {})[action] = False

    for resource, action in granted:
        matrix.setdefault(resource, {})[action] = True

    return matrix


def permission_universe(session: Session) -> List[PermissionPair]:
    """Every distinct (resource, action) pair ever defined."""
    rows = session.exec(
        select(Permission.resource, Permission.action).distinct()
    ).all()
    return [(resource, action) for resource, action in rows]


def granted_pairs(session: Session, role_id: Optional[uuid.UUID]) -> List[PermissionPair]:
    """(resource, action) pairs linked to ``role_id``; empty for no role."""
    if role_id is None:
        return []

    rows = session.exec(
        select(Permission.resource, Permission.action)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .where(RolePermission.role_id == role_id)
    ).all()
    return [(resource, action) for resource, action in rows]


def resolve_for_role(session: Session, role_id: Optional[uuid.UUID]) -> PermissionMatrix:
    """
    Resolve the dense permission matrix for ``role_id``.
    ``None`` yields an all-False matrix with the same key set as any role.
    """
    return build_permission_matrix(
        permission_universe(session),
        granted_pairs(session, role_id),
    )


def matrix_has(matrix: Optional[PermissionMatrix], resource: str, action: str) -> bool:
    """Fail-closed lookup: anything other than an explicit True is False."""
    if not isinstance(matrix, dict):
        return False
    actions = matrix.get(resource)
    if not isinstance(actions, dict):
        return False
    return actions.get(action) is True
