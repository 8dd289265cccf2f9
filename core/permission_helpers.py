import uuid
from typing import Optional

from sqlmodel import Session

from core.config import settings
from core.errors import ForbiddenError, ValidationError
from core.permissions import granted_pairs, matrix_has, resolve_for_role
from models.role import Role
from models.user import User

SUPER_ADMIN_REQUIRED = "Super admin access required"


# -----------------------------------------------------
# Role lookups (always from storage, never from the token)
# -----------------------------------------------------
def get_role(session: Session, role_id: Optional[uuid.UUID]) -> Optional[Role]:
    if role_id is None:
        return None
    return session.get(Role, role_id)


def is_super_admin_role(role: Optional[Role]) -> bool:
    return role is not None and role.name == settings.SUPER_ADMIN_ROLE_NAME


def is_super_admin(session: Session, user: User) -> bool:
    """Super admin = master key."""
    return is_super_admin_role(get_role(session, user.role_id))


def is_system_role(role: Role) -> bool:
    return role.name in settings.SYSTEM_ROLE_NAMES


# -----------------------------------------------------
# Permission evaluation
# -----------------------------------------------------
def has_permission(session: Session, user: User, resource: str, action: str) -> bool:
    if is_super_admin(session, user):
        return True

    matrix = resolve_for_role(session, user.role_id)
    return matrix_has(matrix, resource, action)


def require_permission(session: Session, user: User, resource: str, action: str):
    if not has_permission(session, user, resource, action):
        raise ForbiddenError(f"Insufficient permissions: '{resource}.{action}' required")


# -----------------------------------------------------
# Privileged-role assignment guards
# -----------------------------------------------------
def validate_role_assignment(session: Session, requestor: User, role_id: Optional[uuid.UUID]) -> Optional[Role]:
    """
    Resolve the role a caller wants to assign.

    A super admin may assign any role. Anyone else may only hand out a
    role whose granted pairs they hold themselves, and never the super
    admin role.
    """
    if role_id is None:
        return None

    role = session.get(Role, role_id)
    if role is None:
        raise ValidationError(
            "Invalid role_id",
            errors=[{"field": "role_id", "message": "Role does not exist"}],
        )

    if is_super_admin(session, requestor):
        return role

    if is_super_admin_role(role):
        raise ForbiddenError("Only a super admin may assign the super admin role")

    caller_matrix = resolve_for_role(session, requestor.role_id)
    missing = [f"{r}.{a}" for r, a in granted_pairs(session, role.id) if not matrix_has(caller_matrix, r, a)]
    if missing:
        raise ForbiddenError(f"Cannot assign a role with permissions you do not hold: {', '.join(sorted(missing))}")

    return role


def require_can_manage_user(session: Session, requestor: User, target: User):
    """Super admin accounts may only be modified by super admins."""
    if is_super_admin(session, target) and not is_super_admin(session, requestor):
        raise ForbiddenError("Only a super admin may modify a super admin account")
