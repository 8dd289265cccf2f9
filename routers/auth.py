import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from core.errors import UnauthenticatedError
from core.logging_config import logger
from core.rate_limiter import login_rate_limit
from core.responses import success_response
from core.tokens import (
    InvalidTokenError,
    TokenExpiredError,
    issue_refresh_token,
    issue_token,
    verify_refresh_token,
)
from database import get_session
from dependencies.auth import get_caller, require_super_admin
from models.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RefreshTokenRequest,
    SignupRequest,
)
from models.user import User, UserRead
from services import user_service
from services.role_service import role_with_matrix


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# LOGIN
# ============================================================
@router.post(
    "/login",
    summary="Authenticate user",
    dependencies=[Depends(login_rate_limit)],
)
def login(payload: LoginRequest, session: Session = Depends(get_session)):
    """
    Verify credentials and return the user, their role with its dense
    permission matrix, an access token and a refresh token.
    """
    try:
        user = user_service.authenticate(session, payload.email, payload.password)
    except UnauthenticatedError as e:
        logger.warning(f"Login attempt failed for {payload.email}: {e.message}")
        raise

    role = role_with_matrix(session, user.role_id)

    body = LoginResponse(
        user=UserRead.model_validate(user),
        role=role,
        permissions=role.permissions if role else {},
        token=issue_token(str(user.id), user.email),
        refresh_token=issue_refresh_token(str(user.id), user.email),
    )

    logger.info(f"User {user.id} logged in")
    return success_response("Login successful", body)


# ============================================================
# SIGNUP (super admin only)
# ============================================================
@router.post("/signup", summary="Create an account with the default role")
def signup(
    payload: SignupRequest,
    caller: User = Depends(require_super_admin),
    session: Session = Depends(get_session),
):
    user = user_service.signup(session, payload)
    logger.info(f"Super admin {caller.id} signed up {user.email}")
    return success_response("User created successfully", UserRead.model_validate(user), status_code=201)


# ============================================================
# CHANGE PASSWORD
# ============================================================
@router.post("/change-password", summary="Change own password")
def change_password(
    payload: ChangePasswordRequest,
    caller: User = Depends(get_caller),
    session: Session = Depends(get_session),
):
    user_service.change_password(session, caller, payload.current_password, payload.new_password)
    return success_response("Password changed successfully")


# ============================================================
# REFRESH TOKEN
# ============================================================
@router.post("/refresh-token", summary="Exchange a refresh token for a new access token")
def refresh_token(payload: RefreshTokenRequest, session: Session = Depends(get_session)):
    try:
        claims = verify_refresh_token(payload.refresh_token)
    except TokenExpiredError:
        logger.warning("Rejected expired refresh token")
        raise UnauthenticatedError("Refresh token expired")
    except InvalidTokenError:
        logger.warning("Rejected invalid refresh token")
        raise UnauthenticatedError("Invalid refresh token")

    try:
        user_id = uuid.UUID(claims.user_id)
    except ValueError:
        raise UnauthenticatedError("Invalid refresh token")

    user = session.get(User, user_id)
    if user is None or not user.is_active:
        raise UnauthenticatedError("Account not found or deactivated")

    return success_response(
        "Token refreshed successfully",
        {"token": issue_token(str(user.id), user.email)},
    )


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", summary="Current authenticated user")
def read_me(
    caller: User = Depends(get_caller),
    session: Session = Depends(get_session),
):
    body = MeResponse(
        user=UserRead.model_validate(caller),
        role=role_with_matrix(session, caller.role_id),
    )
    return success_response("Profile retrieved successfully", body)
