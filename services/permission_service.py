# services/permission_service.py

import uuid
from typing import List, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from core.errors import NotFoundError, handle_integrity_error
from core.logging_config import logger
from models.common import ListQuery, utcnow
from models.permission import Permission, PermissionCreate, PermissionUpdate

PERMISSION_NAME_TAKEN = "A permission with this name already exists"


def get_permission_or_404(session: Session, permission_id: uuid.UUID) -> Permission:
    permission = session.get(Permission, permission_id)
    if permission is None:
        raise NotFoundError("Permission not found")
    return permission


def list_permissions(session: Session, query: ListQuery) -> Tuple[List[Permission], int]:
    conditions = []
    if query.search:
        pattern = f"%{query.search}%"
        conditions.append(
            or_(
                col(Permission.name).ilike(pattern),
                col(Permission.resource).ilike(pattern),
                col(Permission.action).ilike(pattern),
            )
        )

    stmt = (
        select(Permission)
        .where(*conditions)
        .order_by(col(Permission.resource), col(Permission.action))
        .offset(query.offset)
        .limit(query.limit)
    )
    items = list(session.exec(stmt).all())
    total = session.exec(select(func.count()).select_from(Permission).where(*conditions)).one()
    return items, total


def _commit_permission(session: Session, permission: Permission) -> Permission:
    session.add(permission)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise handle_integrity_error(e, PERMISSION_NAME_TAKEN)
    session.refresh(permission)
    return permission


def create_permission(session: Session, payload: PermissionCreate) -> Permission:
    permission = Permission(
        name=payload.name,
        resource=payload.resource,
        action=payload.action,
        description=payload.description,
    )
    permission = _commit_permission(session, permission)
    logger.info(f"Permission created: {permission.name}")
    return permission


def update_permission(session: Session, permission_id: uuid.UUID, payload: PermissionUpdate) -> Permission:
    permission = get_permission_or_404(session, permission_id)

    for field in ("name", "resource", "action"):
        value = getattr(payload, field)
        if field in payload.model_fields_set and value is not None:
            setattr(permission, field, value)

    if "description" in payload.model_fields_set:
        permission.description = payload.description

    permission.updated_at = utcnow()
    return _commit_permission(session, permission)


def delete_permission(session: Session, permission_id: uuid.UUID) -> None:
    # role_permissions rows go with it (ON DELETE CASCADE)
    permission = get_permission_or_404(session, permission_id)
    session.delete(permission)
    session.commit()
    logger.info(f"Permission deleted: {permission_id}")
