# jewelry_api/routers/admin_auth.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from jewelry_api.core.auth import get_current_admin, require_super_admin
from jewelry_api.core.config import get_settings
from jewelry_api.core.rate_limit import RateLimiter
from jewelry_api.database import get_session
from jewelry_api.models.admin import Admin
from jewelry_api.repositories.admin_repo import AdminRepository
from jewelry_api.schemas.admin import (
    AdminCreate,
    AdminProfile,
    AdminUpdate,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    PasswordValidationRequest,
    PasswordValidationResult,
)
from jewelry_api.schemas.common import ApiResponse
from jewelry_api.services.auth_service import AuthService

settings = get_settings()

router = APIRouter(prefix="/admin/auth", tags=["Admin auth"])

repo = AdminRepository()
service = AuthService(repo)

login_limiter = RateLimiter(
    "login",
    max_requests=settings.LOGIN_RATE_LIMIT,
    window_seconds=settings.LOGIN_RATE_WINDOW_SECONDS,
    message="Too many login attempts, please try again later",
)


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    dependencies=[Depends(login_limiter)],
)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
):
    """
    Exchange email + password for a bearer token.

    Wrong email and wrong password produce the same 401.
    """
    result = service.login(session, payload.email, payload.password)
    return ApiResponse(data=result, message="Login successful")


@router.get("/profile", response_model=ApiResponse[AdminProfile])
def get_profile(admin: Admin = Depends(get_current_admin)):
    """Return the authenticated admin's profile."""
    return ApiResponse(data=AdminProfile.model_validate(admin))


@router.put("/password", response_model=ApiResponse[None])
def change_password(
    payload: ChangePasswordRequest,
    session: Session = Depends(get_session),
    admin: Admin = Depends(get_current_admin),
):
    """
    Change own password.

    - 400 with the list of unmet rules if the new password is weak.
    - 401 if the current password is wrong.
    """
    service.change_password(
        session, admin, payload.current_password, payload.new_password
    )
    return ApiResponse(message="Password changed successfully")


@router.post(
    "/validate-password",
    response_model=ApiResponse[PasswordValidationResult],
)
def validate_password(payload: PasswordValidationRequest):
    """Check a candidate password against the policy (no auth)."""
    return ApiResponse(data=service.validate_password_strength(payload.password))


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    dependencies=[Depends(get_current_admin)],
)
def logout():
    """
    Tokens are stateless: the client discards its token. The token
    stays valid until it expires.
    """
    return ApiResponse(message="Logged out successfully")


@router.post(
    "/create-admin",
    response_model=ApiResponse[AdminProfile],
    status_code=status.HTTP_201_CREATED,
)
def create_admin(
    payload: AdminCreate,
    session: Session = Depends(get_session),
    actor: Admin = Depends(require_super_admin),
):
    """Create an admin account (super_admin only)."""
    admin = service.create_admin(session, actor, payload)
    return ApiResponse(
        data=AdminProfile.model_validate(admin),
        message="Admin created successfully",
    )


@router.put("/admin/{admin_id}", response_model=ApiResponse[AdminProfile])
def update_admin(
    admin_id: uuid.UUID,
    payload: AdminUpdate,
    session: Session = Depends(get_session),
    actor: Admin = Depends(require_super_admin),
):
    """Update another admin's name, email or role (super_admin only)."""
    admin = service.update_admin(session, actor, admin_id, payload)
    return ApiResponse(
        data=AdminProfile.model_validate(admin),
        message="Admin updated successfully",
    )
