# routers/roles.py

import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from core.responses import success_response
from database import get_session
from dependencies.auth import require_super_admin
from dependencies.pagination import list_query
from models.common import ListQuery, Pagination
from models.role import RoleCreate, RolePermissionsUpdate, RoleRead, RoleUpdate
from services import role_service


# Role administration is reserved for the super admin
router = APIRouter(
    prefix="/roles",
    tags=["Roles"],
    dependencies=[Depends(require_super_admin)],
)


# ============================================================
# LIST / READ
# ============================================================
@router.get("", summary="List roles")
def list_roles(
    query: ListQuery = Depends(list_query),
    session: Session = Depends(get_session),
):
    roles, total = role_service.list_roles(session, query)
    return success_response(
        "Roles retrieved successfully",
        {"roles": roles, "pagination": Pagination.build(query.page, query.limit, total)},
    )


@router.get("/{role_id}", summary="Get role with permissions")
def get_role(role_id: uuid.UUID, session: Session = Depends(get_session)):
    role = role_service.get_role_or_404(session, role_id)
    return success_response("Role retrieved successfully", role_service.role_detail(session, role))


# ============================================================
# CREATE / UPDATE / DELETE
# ============================================================
@router.post("", summary="Create role")
def create_role(payload: RoleCreate, session: Session = Depends(get_session)):
    role = role_service.create_role(session, payload.name)
    return success_response("Role created successfully", RoleRead.model_validate(role), status_code=201)


@router.put("/{role_id}", summary="Rename role")
def update_role(role_id: uuid.UUID, payload: RoleUpdate, session: Session = Depends(get_session)):
    role = role_service.update_role(session, role_id, payload.name)
    return success_response("Role updated successfully", RoleRead.model_validate(role))


@router.delete("/{role_id}", summary="Delete role")
def delete_role(role_id: uuid.UUID, session: Session = Depends(get_session)):
    role_service.delete_role(session, role_id)
    return success_response("Role deleted successfully")


# ============================================================
# GRANT / REVOKE
# ============================================================
@router.post("/{role_id}/permissions", summary="Grant permissions to role")
def grant_permissions(
    role_id: uuid.UUID,
    payload: RolePermissionsUpdate,
    session: Session = Depends(get_session),
):
    """Idempotent: pairs the role already holds are left alone."""
    role = role_service.grant_permissions(session, role_id, payload.permission_ids)
    return success_response("Permissions granted successfully", role_service.role_detail(session, role))


@router.delete("/{role_id}/permissions", summary="Revoke permissions from role")
def revoke_permissions(
    role_id: uuid.UUID,
    payload: RolePermissionsUpdate,
    session: Session = Depends(get_session),
):
    role = role_service.revoke_permissions(session, role_id, payload.permission_ids)
    return success_response("Permissions revoked successfully", role_service.role_detail(session, role))
