# jewelry_api/services/auth_service.py
import logging
import uuid

from sqlmodel import Session

from jewelry_api.core.errors import (
    ConflictError,
    DuplicateResourceError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from jewelry_api.core.security import (
    create_access_token,
    dummy_verify,
    hash_password,
    needs_rehash,
    now_utc,
    password_strength_errors,
    verify_password,
)
from jewelry_api.models.admin import Admin
from jewelry_api.repositories.admin_repo import AdminRepository
from jewelry_api.schemas.admin import (
    AdminCreate,
    AdminProfile,
    AdminUpdate,
    LoginResponse,
    PasswordValidationResult,
)

logger = logging.getLogger(__name__)

SUPER_ADMIN = "super_admin"


class AuthService:
    """
    Admin identity.

    Responsibilities:
      - credential checks and token issuance
      - password policy and rehashing
      - admin account management (super_admin only)
    """

    def __init__(self, repo: AdminRepository):
        self.repo = repo

    # ----- Authentication -----

    def login(self, session: Session, email: str, password: str) -> LoginResponse:
        """
        Authenticate and issue an access token.

        Unknown email and wrong password raise the same error; the
        unknown-email path still runs a hash verification.
        """
        admin = self.repo.get_by_email(session, email)
        if admin is None:
            dummy_verify()
            logger.info("Failed admin login: unknown email")
            raise InvalidCredentialsError()

        if not verify_password(password, admin.password_hash):
            logger.info("Failed admin login for %s: wrong password", admin.id)
            raise InvalidCredentialsError()

        if needs_rehash(admin.password_hash):
            admin.password_hash = hash_password(password)

        admin.last_login = now_utc()
        admin = self.repo.update(session, admin)

        token, expires_in = create_access_token(admin.id)
        logger.info("Admin %s logged in", admin.id)
        return LoginResponse(
            token=token,
            admin=AdminProfile.model_validate(admin),
            expires_in=expires_in,
        )

    def get_profile(self, session: Session, admin_id: uuid.UUID) -> Admin:
        admin = self.repo.get_by_id(session, admin_id)
        if not admin:
            raise NotFoundError("Admin")
        return admin

    # ----- Passwords -----

    @staticmethod
    def validate_password_strength(password: str) -> PasswordValidationResult:
        errors = password_strength_errors(password)
        return PasswordValidationResult(is_valid=not errors, errors=errors)

    def _require_strong(self, password: str) -> None:
        errors = password_strength_errors(password)
        if errors:
            raise ValidationError("Password does not meet requirements", details=errors)

    def change_password(
        self,
        session: Session,
        admin: Admin,
        current_password: str,
        new_password: str,
    ) -> None:
        """
        Order of checks: strength policy (400), then current password (401).
        """
        self._require_strong(new_password)

        if not verify_password(current_password, admin.password_hash):
            logger.info("Password change rejected for %s: wrong current password", admin.id)
            raise InvalidCredentialsError("Current password is incorrect")

        admin.password_hash = hash_password(new_password)
        admin.updated_at = now_utc()
        self.repo.update(session, admin)
        logger.info("Admin %s changed password", admin.id)

    # ----- Admin management (super_admin only) -----

    @staticmethod
    def ensure_super_admin(actor: Admin) -> None:
        if actor.role != SUPER_ADMIN:
            raise ForbiddenError("Super admin privileges required")

    def create_admin(
        self,
        session: Session,
        actor: Admin,
        payload: AdminCreate,
    ) -> Admin:
        self.ensure_super_admin(actor)
        self._require_strong(payload.password)

        email = payload.email.lower()
        if self.repo.get_by_email(session, email):
            raise DuplicateResourceError("Admin", "email", email)

        admin = Admin(
            email=email,
            name=payload.name,
            role=payload.role,
            password_hash=hash_password(payload.password),
        )
        admin = self.repo.create(session, admin)
        logger.info("Admin %s created admin %s (%s)", actor.id, admin.id, admin.role)
        return admin

    def update_admin(
        self,
        session: Session,
        actor: Admin,
        admin_id: uuid.UUID,
        payload: AdminUpdate,
    ) -> Admin:
        self.ensure_super_admin(actor)
        admin = self.repo.get_by_id(session, admin_id)
        if not admin:
            raise NotFoundError("Admin")

        data = payload.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in data:
            email = data["email"].lower()
            existing = self.repo.get_by_email(session, email)
            if existing and existing.id != admin.id:
                raise DuplicateResourceError("Admin", "email", email)
            admin.email = email
        if "name" in data:
            admin.name = data["name"].strip()
        if "role" in data:
            if (
                admin.role == "super_admin"
                and data["role"] != "super_admin"
                and self.repo.count_by_role(session, "super_admin") <= 1
            ):
                raise ConflictError("Cannot remove the role of the last super admin")
            admin.role = data["role"]

        admin.updated_at = now_utc()
        return self.repo.update(session, admin)

    def bootstrap_super_admin(
        self,
        session: Session,
        email: str,
        password: str,
        name: str,
    ) -> Admin | None:
        """
        Create the first super admin if no admin has this email yet.

        Returns the new admin, or None when it already existed.
        """
        if self.repo.get_by_email(session, email):
            return None
        admin = self.repo.create(
            session,
            Admin(
                email=email.lower(),
                name=name,
                role=SUPER_ADMIN,
                password_hash=hash_password(password),
            ),
        )
        logger.info("Bootstrapped super admin %s", admin.email)
        return admin
