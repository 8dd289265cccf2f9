# services/user_service.py

"""
Credential store operations.

Signup and administrative creation are separate functions: signup
always lands on the configured default role, admin creation takes an
explicit role and active flag.
"""

import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from core.config import settings
from core.errors import ForbiddenError, NotFoundError, UnauthenticatedError, ValidationError, handle_integrity_error
from core.logging_config import logger
from core.permission_helpers import (
    get_role,
    is_super_admin,
    is_super_admin_role,
    require_can_manage_user,
    validate_role_assignment,
)
from core.security import hash_password, verify_password
from models.auth import SignupRequest
from models.common import ListQuery, utcnow
from models.role import Role
from models.user import User, UserCreate, UserListItem, UserUpdate

EMAIL_TAKEN = "An account with this email already exists"


# -----------------------------------------------------
# Lookups
# -----------------------------------------------------
def find_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == email.strip().lower())).first()


def get_user_or_404(session: Session, user_id: uuid.UUID) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def to_list_item(session: Session, user: User) -> UserListItem:
    role = get_role(session, user.role_id)
    item = UserListItem.model_validate(user)
    item.role_name = role.name if role else None
    return item


def list_users(session: Session, query: ListQuery) -> Tuple[List[UserListItem], int]:
    """Newest first; ``search`` matches name or email, case-insensitive."""
    conditions = []
    if query.search:
        pattern = f"%{query.search}%"
        conditions.append(or_(col(User.name).ilike(pattern), col(User.email).ilike(pattern)))

    stmt = (
        select(User, Role.name)
        .join(Role, col(User.role_id) == Role.id, isouter=True)
        .where(*conditions)
        .order_by(col(User.created_at).desc(), col(User.email))
        .offset(query.offset)
        .limit(query.limit)
    )
    rows = session.exec(stmt).all()

    total = session.exec(select(func.count()).select_from(User).where(*conditions)).one()

    items = []
    for user, role_name in rows:
        item = UserListItem.model_validate(user)
        item.role_name = role_name
        items.append(item)

    return items, total


def count_super_admins(session: Session) -> int:
    stmt = (
        select(func.count())
        .select_from(User)
        .join(Role, col(User.role_id) == Role.id)
        .where(Role.name == settings.SUPER_ADMIN_ROLE_NAME, col(User.is_active).is_(True))
    )
    return session.exec(stmt).one()


# -----------------------------------------------------
# Persist helper (storage-level uniqueness)
# -----------------------------------------------------
def _commit_user(session: Session, user: User) -> User:
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise handle_integrity_error(e, EMAIL_TAKEN)
    session.refresh(user)
    return user


# -----------------------------------------------------
# Authentication
# -----------------------------------------------------
def authenticate(session: Session, email: str, password: str) -> User:
    user = find_by_email(session, email)
    if user is None:
        raise UnauthenticatedError("Invalid email or password")

    if not user.is_active:
        raise UnauthenticatedError("Account is deactivated")

    if not verify_password(password, user.password_hash):
        raise UnauthenticatedError("Invalid email or password")

    return user


def change_password(session: Session, user: User, current_password: str, new_password: str) -> User:
    if not verify_password(current_password, user.password_hash):
        raise UnauthenticatedError("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"User {user.id} changed their password")
    return user


# -----------------------------------------------------
# Signup (super admin provisions; default role applied)
# -----------------------------------------------------
def default_role(session: Session) -> Optional[Role]:
    """Look up the configured default role once per user creation."""
    if not settings.DEFAULT_ROLE_NAME:
        return None

    role = session.exec(select(Role).where(Role.name == settings.DEFAULT_ROLE_NAME)).first()
    if role is None:
        logger.warning(f"Default role '{settings.DEFAULT_ROLE_NAME}' not found; user created without a role")
    return role


def signup(session: Session, payload: SignupRequest) -> User:
    role = default_role(session)

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role_id=role.id if role else None,
        is_active=True,
    )
    user = _commit_user(session, user)

    logger.info(f"Account created via signup: {user.email}")
    return user


# -----------------------------------------------------
# Admin CRUD
# -----------------------------------------------------
def create_user(session: Session, requestor: User, payload: UserCreate) -> User:
    role = validate_role_assignment(session, requestor, payload.role_id)

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role_id=role.id if role else None,
        is_active=payload.is_active,
    )
    user = _commit_user(session, user)

    logger.info(f"User {requestor.id} created account {user.email}")
    return user


def _ensure_super_admin_remains(session: Session, target: User, new_role: Optional[Role], is_active: bool):
    """Refuse to demote or deactivate the last active super admin."""
    if not is_super_admin(session, target) or not target.is_active:
        return

    stays_super_admin = is_super_admin_role(new_role) and is_active
    if not stays_super_admin and count_super_admins(session) <= 1:
        raise ValidationError("Cannot demote or deactivate the last remaining super admin")


def update_user(session: Session, requestor: User, user_id: uuid.UUID, payload: UserUpdate) -> User:
    user = get_user_or_404(session, user_id)
    require_can_manage_user(session, requestor, user)

    fields = payload.model_fields_set

    if user.id == requestor.id and fields & {"role_id", "is_active"} and not is_super_admin(session, requestor):
        raise ForbiddenError("You cannot change your own role or active status")

    new_role = get_role(session, user.role_id)
    if "role_id" in fields:
        new_role = validate_role_assignment(session, requestor, payload.role_id)

    new_active = user.is_active
    if "is_active" in fields and payload.is_active is not None:
        new_active = payload.is_active

    _ensure_super_admin_remains(session, user, new_role, new_active)

    if "name" in fields and payload.name is not None:
        user.name = payload.name
    if "email" in fields and payload.email is not None:
        user.email = payload.email
    if "password" in fields and payload.password:
        user.password_hash = hash_password(payload.password)
    if "role_id" in fields:
        user.role_id = new_role.id if new_role else None
    user.is_active = new_active
    user.updated_at = utcnow()

    return _commit_user(session, user)


def delete_user(session: Session, requestor: User, user_id: uuid.UUID) -> None:
    user = get_user_or_404(session, user_id)

    if user.id == requestor.id:
        raise ValidationError("You cannot delete your own account")

    require_can_manage_user(session, requestor, user)

    session.delete(user)
    session.commit()
    logger.info(f"User {requestor.id} deleted account {user_id}")
