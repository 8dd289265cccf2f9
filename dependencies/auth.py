import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlmodel import Session

from core.errors import ForbiddenError, UnauthenticatedError
from core.logging_config import logger
from core.permission_helpers import SUPER_ADMIN_REQUIRED, is_super_admin, require_permission
from core.tokens import InvalidTokenError, TokenExpiredError, verify_token
from database import get_session
from models.user import User

# auto_error=False so a missing header surfaces as our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current User Model (identity proven by the token)
# ============================================================
class CurrentUser(BaseModel):
    id: uuid.UUID
    email: str


# ============================================================
# CHECKPOINT 1: AUTHENTICATE
# ============================================================
def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or not credentials.credentials.strip():
        raise UnauthenticatedError("No token provided")

    token = credentials.credentials.strip()

    try:
        claims = verify_token(token)
    except TokenExpiredError:
        logger.warning(f"Rejected expired token at {request.url.path}")
        raise UnauthenticatedError("Token expired")
    except InvalidTokenError:
        logger.warning(f"Rejected invalid token at {request.url.path}")
        raise UnauthenticatedError("Invalid token")

    try:
        user_id = uuid.UUID(claims.user_id)
    except ValueError:
        logger.warning(f"Rejected token with malformed subject at {request.url.path}")
        raise UnauthenticatedError("Invalid token")

    current_user = CurrentUser(id=user_id, email=claims.email)
    request.state.user = current_user
    return current_user


# ============================================================
# CALLER: the stored account behind the token
# ============================================================
def get_caller(
    current_user: Optional[CurrentUser] = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> User:
    """
    Re-load the caller from storage. Role state is read here on every
    privileged request; nothing about the role is trusted from the token.
    """
    if current_user is None:
        # authorize must never run without authenticate
        raise UnauthenticatedError("Authentication required")

    user = session.get(User, current_user.id)
    if user is None or not user.is_active:
        logger.warning(f"Token for missing or deactivated account {current_user.id}")
        raise UnauthenticatedError("Account not found or deactivated")

    return user


# ============================================================
# CHECKPOINT 2: AUTHORIZE
# ============================================================
def require_super_admin(
    caller: User = Depends(get_caller),
    session: Session = Depends(get_session),
) -> User:
    if not is_super_admin(session, caller):
        logger.warning(f"Super admin check failed for user {caller.id}")
        raise ForbiddenError(SUPER_ADMIN_REQUIRED)
    return caller


def requires_permission(resource: str, action: str):
    """
    Usage:
        @router.get("/", dependencies=[Depends(requires_permission("user", "read"))])

    The super admin role passes unconditionally; every other role needs
    the (resource, action) pair set in its resolved matrix.
    """

    def dependency(
        caller: User = Depends(get_caller),
        session: Session = Depends(get_session),
    ) -> User:
        try:
            require_permission(session, caller, resource, action)
        except ForbiddenError:
            logger.warning(f"User {caller.id} lacks {resource}.{action}")
            raise
        return caller

    return dependency
