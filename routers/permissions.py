# routers/permissions.py

import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from core.responses import success_response
from database import get_session
from dependencies.auth import require_super_admin
from dependencies.pagination import list_query
from models.common import ListQuery, Pagination
from models.permission import PermissionCreate, PermissionRead, PermissionUpdate
from services import permission_service


router = APIRouter(
    prefix="/permissions",
    tags=["Permissions"],
    dependencies=[Depends(require_super_admin)],
)


# -----------------------------------------------------
# LIST / GET
# -----------------------------------------------------
@router.get("", summary="List permissions")
def list_permissions(
    query: ListQuery = Depends(list_query),
    session: Session = Depends(get_session),
):
    permissions, total = permission_service.list_permissions(session, query)
    return success_response(
        "Permissions retrieved successfully",
        {
            "permissions": [PermissionRead.model_validate(p) for p in permissions],
            "pagination": Pagination.build(query.page, query.limit, total),
        },
    )


@router.get("/{permission_id}", summary="Get permission by id")
def get_permission(permission_id: uuid.UUID, session: Session = Depends(get_session)):
    permission = permission_service.get_permission_or_404(session, permission_id)
    return success_response("Permission retrieved successfully", PermissionRead.model_validate(permission))


# -----------------------------------------------------
# CREATE / UPDATE / DELETE
# -----------------------------------------------------
@router.post("", summary="Create permission")
def create_permission(payload: PermissionCreate, session: Session = Depends(get_session)):
    permission = permission_service.create_permission(session, payload)
    return success_response(
        "Permission created successfully",
        PermissionRead.model_validate(permission),
        status_code=201,
    )


@router.put("/{permission_id}", summary="Update permission")
def update_permission(
    permission_id: uuid.UUID,
    payload: PermissionUpdate,
    session: Session = Depends(get_session),
):
    permission = permission_service.update_permission(session, permission_id, payload)
    return success_response("Permission updated successfully", PermissionRead.model_validate(permission))


@router.delete("/{permission_id}", summary="Delete permission")
def delete_permission(permission_id: uuid.UUID, session: Session = Depends(get_session)):
    # Grants referencing it are removed by ON DELETE CASCADE
    permission_service.delete_permission(session, permission_id)
    return success_response("Permission deleted successfully")
