# services/role_service.py

import uuid
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from core.errors import ConflictError, NotFoundError, ValidationError, handle_integrity_error
from core.logging_config import logger
from core.permission_helpers import is_system_role
from core.permissions import resolve_for_role
from models.common import ListQuery, utcnow
from models.permission import Permission, PermissionRead
from models.role import Role, RoleDetail, RoleListItem, RolePermission, RoleWithPermissions
from models.user import User

ROLE_NAME_TAKEN = "A role with this name already exists"


# -----------------------------------------------------
# Lookups
# -----------------------------------------------------
def get_role_or_404(session: Session, role_id: uuid.UUID) -> Role:
    role = session.get(Role, role_id)
    if role is None:
        raise NotFoundError("Role not found")
    return role


def list_roles(session: Session, query: ListQuery) -> Tuple[List[RoleListItem], int]:
    permission_count = (
        select(func.count(RolePermission.permission_id))
        .where(RolePermission.role_id == Role.id)
        .correlate(Role)
        .scalar_subquery()
    )
    user_count = (
        select(func.count(User.id))
        .where(User.role_id == Role.id)
        .correlate(Role)
        .scalar_subquery()
    )

    conditions = []
    if query.search:
        conditions.append(col(Role.name).ilike(f"%{query.search}%"))

    stmt = (
        select(Role, permission_count.label("permission_count"), user_count.label("user_count"))
        .where(*conditions)
        .order_by(col(Role.created_at).desc(), col(Role.name))
        .offset(query.offset)
        .limit(query.limit)
    )
    rows = session.exec(stmt).all()
    total = session.exec(select(func.count()).select_from(Role).where(*conditions)).one()

    items = []
    for role, perms, users in rows:
        item = RoleListItem.model_validate(role)
        item.permission_count = perms or 0
        item.user_count = users or 0
        items.append(item)

    return items, total


def role_permissions(session: Session, role_id: uuid.UUID) -> Sequence[Permission]:
    stmt = (
        select(Permission)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .where(RolePermission.role_id == role_id)
        .order_by(col(Permission.resource), col(Permission.action))
    )
    return session.exec(stmt).all()


def role_with_matrix(session: Session, role_id: Optional[uuid.UUID]) -> Optional[RoleWithPermissions]:
    """The caller's role with its dense matrix nested under ``permissions``."""
    if role_id is None:
        return None

    role = session.get(Role, role_id)
    if role is None:
        return None

    payload = RoleWithPermissions.model_validate(role)
    payload.permissions = resolve_for_role(session, role.id)
    return payload


def role_detail(session: Session, role: Role) -> RoleDetail:
    detail = RoleDetail.model_validate(role)
    detail.permission_list = [PermissionRead.model_validate(p) for p in role_permissions(session, role.id)]
    detail.permissions = resolve_for_role(session, role.id)
    return detail


# -----------------------------------------------------
# CRUD
# -----------------------------------------------------
def _commit_role(session: Session, role: Role) -> Role:
    session.add(role)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise handle_integrity_error(e, ROLE_NAME_TAKEN)
    session.refresh(role)
    return role


def create_role(session: Session, name: str) -> Role:
    role = _commit_role(session, Role(name=name))
    logger.info(f"Role created: {role.name}")
    return role


def update_role(session: Session, role_id: uuid.UUID, name: str) -> Role:
    role = get_role_or_404(session, role_id)

    if is_system_role(role):
        raise ValidationError("System role cannot be modified")

    role.name = name
    role.updated_at = utcnow()
    return _commit_role(session, role)


def delete_role(session: Session, role_id: uuid.UUID) -> None:
    role = get_role_or_404(session, role_id)

    if is_system_role(role):
        raise ValidationError("System role cannot be deleted")

    assigned = session.exec(
        select(func.count()).select_from(User).where(User.role_id == role_id)
    ).one()
    if assigned:
        raise ConflictError(f"Role is still assigned to {assigned} user(s)")

    session.delete(role)
    try:
        session.commit()
    except IntegrityError:
        # A user picked up the role between the check and the delete
        session.rollback()
        raise ConflictError("Role is still assigned to users")

    logger.info(f"Role deleted: {role_id}")


# -----------------------------------------------------
# Grants (idempotent, single transaction)
# -----------------------------------------------------
def _dedupe(ids: Iterable[uuid.UUID]) -> List[uuid.UUID]:
    return list(dict.fromkeys(ids))


def _insert_ignoring_duplicates(session: Session, rows: List[dict]):
    """
    INSERT ... ON CONFLICT DO NOTHING on the (role_id, permission_id) key,
    so a concurrent grant of the same pair is a no-op, not an error.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        for row in rows:
            session.add(RolePermission(**row))
        return

    stmt = (
        insert(RolePermission)
        .values(rows)
        .on_conflict_do_nothing(index_elements=["role_id", "permission_id"])
    )
    session.execute(stmt)


def grant_permissions(session: Session, role_id: uuid.UUID, permission_ids: Iterable[uuid.UUID]) -> Role:
    role = get_role_or_404(session, role_id)
    ids = _dedupe(permission_ids)

    found = set(session.exec(select(Permission.id).where(col(Permission.id).in_(ids))).all())
    unknown = [str(pid) for pid in ids if pid not in found]
    if unknown:
        raise ValidationError(
            "Unknown permission ids",
            errors=[{"field": "permission_ids", "message": f"Permission not found: {pid}"} for pid in unknown],
        )

    already = set(
        session.exec(
            select(RolePermission.permission_id).where(
                RolePermission.role_id == role_id,
                col(RolePermission.permission_id).in_(ids),
            )
        ).all()
    )
    now = utcnow()
    rows = [
        {"role_id": role_id, "permission_id": pid, "created_at": now}
        for pid in ids
        if pid not in already
    ]

    if rows:
        try:
            _insert_ignoring_duplicates(session, rows)
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise handle_integrity_error(e, "Permission already granted")

    logger.info(f"Granted {len(rows)} new permission(s) to role {role.name}")
    session.refresh(role)
    return role


def revoke_permissions(session: Session, role_id: uuid.UUID, permission_ids: Iterable[uuid.UUID]) -> Role:
    role = get_role_or_404(session, role_id)
    ids = _dedupe(permission_ids)

    result = session.execute(
        delete(RolePermission).where(
            RolePermission.role_id == role_id,
            col(RolePermission.permission_id).in_(ids),
        )
    )
    session.commit()

    logger.info(f"Revoked {result.rowcount or 0} permission(s) from role {role.name}")
    session.refresh(role)
    return role
