# jobs/seed_database.py

"""
One-shot bootstrap: system roles, the default permission catalog, the
default grants and the first super admin account.

Safe to run repeatedly; existing rows are left as they are.
"""

from typing import Dict, Optional

from sqlmodel import Session, select

from core.config import settings
from core.logging_config import logger
from core.permissions import DEFAULT_PERMISSIONS, DEFAULT_ROLE_GRANTS
from core.security import hash_password
from models.permission import Permission
from models.role import Role, RolePermission
from models.user import User


def _ensure_role(session: Session, name: str) -> Role:
    role = session.exec(select(Role).where(Role.name == name)).first()
    if role is None:
        role = Role(name=name)
        session.add(role)
        session.flush()
        logger.info(f"Seeded role {name}")
    return role


def _ensure_permission(session: Session, resource: str, action: str, description: str) -> Permission:
    name = f"{resource}.{action}"
    permission = session.exec(select(Permission).where(Permission.name == name)).first()
    if permission is None:
        permission = Permission(name=name, resource=resource, action=action, description=description)
        session.add(permission)
        session.flush()
        logger.info(f"Seeded permission {name}")
    return permission


def _ensure_grant(session: Session, role: Role, permission: Permission) -> bool:
    if session.get(RolePermission, (role.id, permission.id)) is not None:
        return False
    session.add(RolePermission(role_id=role.id, permission_id=permission.id))
    return True


def seed(
    session: Session,
    admin_email: Optional[str] = None,
    admin_password: Optional[str] = None,
    admin_name: Optional[str] = None,
) -> Dict[str, int]:
    """
    Seed everything in one transaction and return counts of what exists.
    The super admin account is only created when email and password are given.
    """
    roles = {name: _ensure_role(session, name) for name in settings.SYSTEM_ROLE_NAMES}
    super_admin_role = roles.get(settings.SUPER_ADMIN_ROLE_NAME) or _ensure_role(
        session, settings.SUPER_ADMIN_ROLE_NAME
    )

    permissions = {
        f"{p['resource']}.{p['action']}": _ensure_permission(session, p["resource"], p["action"], p["description"])
        for p in DEFAULT_PERMISSIONS
    }

    new_grants = 0
    for permission in permissions.values():
        new_grants += _ensure_grant(session, super_admin_role, permission)

    for role_name, permission_names in DEFAULT_ROLE_GRANTS.items():
        role = roles.get(role_name)
        if role is None:
            continue
        for permission_name in permission_names:
            new_grants += _ensure_grant(session, role, permissions[permission_name])

    created_admin = 0
    if admin_email and admin_password:
        email = admin_email.strip().lower()
        existing = session.exec(select(User).where(User.email == email)).first()
        if existing is None:
            session.add(
                User(
                    name=admin_name or settings.SEED_ADMIN_NAME,
                    email=email,
                    password_hash=hash_password(admin_password),
                    role_id=super_admin_role.id,
                    is_active=True,
                )
            )
            created_admin = 1
            logger.info(f"Seeded super admin account {email}")
        else:
            logger.info(f"Super admin account {email} already exists; left unchanged")
    else:
        logger.warning("SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD not set; no super admin account created")

    session.commit()

    return {
        "roles": len(roles),
        "permissions": len(permissions),
        "new_grants": new_grants,
        "created_admin": created_admin,
    }


def run():
    """
    CLI entry point:

        python -m jobs.seed_database
    """
    from database import create_db_and_tables, engine

    create_db_and_tables()
    with Session(engine) as session:
        summary = seed(
            session,
            admin_email=settings.SEED_ADMIN_EMAIL,
            admin_password=settings.SEED_ADMIN_PASSWORD,
        )
    logger.info(f"Seed complete: {summary}")


if __name__ == "__main__":
    run()
