# routers/users.py

import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from core.responses import success_response
from database import get_session
from dependencies.auth import require_super_admin, requires_permission
from dependencies.pagination import list_query
from models.common import ListQuery, Pagination
from models.user import User, UserCreate, UserUpdate
from services import user_service


router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


# -----------------------------------------------------
# LIST USERS
# -----------------------------------------------------
@router.get("", summary="List users")
def list_users(
    query: ListQuery = Depends(list_query),
    _caller: User = Depends(requires_permission("user", "read")),
    session: Session = Depends(get_session),
):
    """Newest first. ``search`` matches name or email."""
    users, total = user_service.list_users(session, query)
    return success_response(
        "Users retrieved successfully",
        {"users": users, "pagination": Pagination.build(query.page, query.limit, total)},
    )


# -----------------------------------------------------
# GET USER
# -----------------------------------------------------
@router.get("/{user_id}", summary="Get user by id")
def get_user(
    user_id: uuid.UUID,
    _caller: User = Depends(requires_permission("user", "read")),
    session: Session = Depends(get_session),
):
    user = user_service.get_user_or_404(session, user_id)
    return success_response("User retrieved successfully", user_service.to_list_item(session, user))


# -----------------------------------------------------
# CREATE USER (super admin)
# -----------------------------------------------------
@router.post("", summary="Create user")
def create_user(
    payload: UserCreate,
    caller: User = Depends(require_super_admin),
    session: Session = Depends(get_session),
):
    user = user_service.create_user(session, caller, payload)
    return success_response(
        "User created successfully",
        user_service.to_list_item(session, user),
        status_code=201,
    )


# -----------------------------------------------------
# UPDATE USER
# -----------------------------------------------------
@router.put("/{user_id}", summary="Update user")
def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    caller: User = Depends(requires_permission("user", "update")),
    session: Session = Depends(get_session),
):
    user = user_service.update_user(session, caller, user_id, payload)
    return success_response("User updated successfully", user_service.to_list_item(session, user))


# -----------------------------------------------------
# DELETE USER
# -----------------------------------------------------
@router.delete("/{user_id}", summary="Delete user")
def delete_user(
    user_id: uuid.UUID,
    caller: User = Depends(requires_permission("user", "delete")),
    session: Session = Depends(get_session),
):
    user_service.delete_user(session, caller, user_id)
    return success_response("User deleted successfully")
