# jewelry_api/core/auth.py
import logging
import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from jewelry_api.core.errors import (
    ForbiddenError,
    InvalidTokenError,
    UnauthorizedError,
)
from jewelry_api.core.security import decode_access_token
from jewelry_api.database import get_session
from jewelry_api.models.admin import Admin

logger = logging.getLogger(__name__)

# HTTP Bearer scheme:
# - auto_error=False => a missing Authorization header reaches our
#   dependency so it can answer with the standard error envelope.
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Admin:
    """
    Resolve the current admin from a bearer token.

    Flow:
      1. No Authorization header => 401.
      2. Verify signature / issuer / expiry => 'sub' (admin id).
      3. Load the admin row; a deleted admin's token is rejected.
      4. Attach the admin to request.state for downstream logging.

    Raises:
        UnauthorizedError / ExpiredTokenError / InvalidTokenError (401)
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication token required")

    try:
        claims = decode_access_token(credentials.credentials)
    except UnauthorizedError as exc:
        logger.info(
            "Rejected admin token from %s: %s",
            request.client.host if request.client else "unknown",
            exc.code,
        )
        raise

    try:
        admin_id = uuid.UUID(str(claims.get("sub")))
    except ValueError:
        logger.info("Rejected admin token: malformed sub claim")
        raise InvalidTokenError()

    admin = session.get(Admin, admin_id)
    if admin is None:
        logger.info("Rejected admin token: admin %s no longer exists", admin_id)
        raise UnauthorizedError("Admin account not found")

    request.state.admin = admin
    return admin


def require_super_admin(admin: Admin = Depends(get_current_admin)) -> Admin:
    """
    Enforce super_admin role.

    Raises:
        ForbiddenError(403): if the admin is a regular admin.
    """
    if admin.role != "super_admin":
        raise ForbiddenError("Super admin privileges required")
    return admin
