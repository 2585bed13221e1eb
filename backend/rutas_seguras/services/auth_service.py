"""
Rutas Seguras Backend — Auth Service (Credentials & Token Issuance)
===================================================================

What:  Self-registration, login, profile read/update, password change, logout.
Why:   The only place where plaintext passwords are handled and tokens issued.
How:   Delegates hashing/signing to `rutas_seguras.security` and account
       persistence to UserService.
Who:   Called by /api/auth handlers.

Login Flow:
    ┌──────────┐    ┌──────────────┐    ┌───────────────┐    ┌──────────┐
    │  Lookup  │───▶│ Active flag? │───▶│ bcrypt verify │───▶│  Token   │
    │ by email │    │              │    │               │    │  (HS256) │
    └──────────┘    └──────────────┘    └───────────────┘    └──────────┘
         │ none            │ inactive          │ mismatch
         └─────────────────┴───────────────────┴──▶ AuthError("Invalid email or password")

    The three failure causes are logged separately but look identical to the
    client, so the response never reveals whether an account exists or is
    disabled.
"""

import asyncio
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.config import Settings
from rutas_seguras.exceptions import (
    AuthError,
    DatabaseError,
    RutasSegurasError,
    ValidationError,
)
from rutas_seguras.models.user import User
from rutas_seguras.schemas.auth import (
    AuthResult,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
)
from rutas_seguras.schemas.user import UserResponse
from rutas_seguras.security import TokenClaims, create_token, hash_password, verify_password
from rutas_seguras.services.user_service import user_service

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def issue_token(user: User, config: Settings) -> str:
    return create_token(
        user_id=user.id,
        email=user.email,
        role=user.role,
        expires_in=config.jwt_expiration_seconds,
        secret=config.jwt_secret,
    )


class AuthService:
    """
    Business logic for authentication.

    Error Handling Strategy:
        Application errors (ConflictError, AuthError, NotFoundError) propagate
        untouched. SQLAlchemy failures are wrapped in DatabaseError so no
        driver detail reaches the client.
    """

    async def register(
        self, db: AsyncSession, config: Settings, payload: RegisterRequest
    ) -> AuthResult:
        """
        Create an account and sign the caller in.

        Returns:
            AuthResult with the public user and a fresh token

        Raises:
            ConflictError: Email already registered (→ 409), nothing written
            DatabaseError: Insert failed (→ 500)
        """
        try:
            user = await user_service.insert_user(
                db,
                config,
                name=payload.name,
                email=payload.email,
                password=payload.password,
                phone=payload.phone,
                role=payload.role,
            )
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error during registration: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Registered user %s (role=%s)", user.id, user.role)
        return AuthResult(user=UserResponse.model_validate(user), token=issue_token(user, config))

    async def login(
        self, db: AsyncSession, config: Settings, payload: LoginRequest
    ) -> AuthResult:
        """
        Exchange email + password for a token.

        Raises:
            AuthError: Unknown email, inactive account or wrong password (→ 401)
        """
        try:
            result = await db.execute(select(User).where(User.email == payload.email))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not sign in. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if user is None:
            logger.warning("Login failed: unknown email")
            raise AuthError(message=INVALID_CREDENTIALS_MESSAGE)

        if not user.active:
            logger.warning("Login failed: user %s is inactive", user.id)
            raise AuthError(message=INVALID_CREDENTIALS_MESSAGE)

        password_ok = await asyncio.to_thread(verify_password, payload.password, user.password_hash)
        if not password_ok:
            logger.warning("Login failed: wrong password for user %s", user.id)
            raise AuthError(message=INVALID_CREDENTIALS_MESSAGE)

        logger.info("User %s logged in", user.id)
        return AuthResult(user=UserResponse.model_validate(user), token=issue_token(user, config))

    async def get_profile(self, db: AsyncSession, user_id: UUID) -> UserResponse:
        """
        Load the caller's own account.

        Raises:
            NotFoundError: The row is gone or soft-deleted (→ 404)
        """
        try:
            user = await user_service.get_user_row(db, user_id, include_inactive=False)
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error loading profile %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not load your profile. Please try again.",
                context={"user_id": str(user_id)},
            )
        return UserResponse.model_validate(user)

    async def update_profile(
        self, db: AsyncSession, user_id: UUID, payload: ProfileUpdateRequest
    ) -> UserResponse:
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError(message="No fields provided to update")

        try:
            user = await user_service.get_user_row(db, user_id, include_inactive=False)
            for field, value in changes.items():
                setattr(user, field, value)
            await db.flush()
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating profile %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update your profile. Please try again.",
                context={"user_id": str(user_id)},
            )

        logger.info("User %s updated own profile (fields: %s)", user_id, ", ".join(sorted(changes)))
        return UserResponse.model_validate(user)

    async def change_password(
        self, db: AsyncSession, config: Settings, user_id: UUID, payload: ChangePasswordRequest
    ) -> None:
        """
        Replace the caller's password after re-checking the current one.

        Raises:
            AuthError:     Current password does not match (→ 401)
            NotFoundError: Account gone or inactive (→ 404)
        """
        try:
            user = await user_service.get_user_row(db, user_id, include_inactive=False)

            current_ok = await asyncio.to_thread(
                verify_password, payload.current_password, user.password_hash
            )
            if not current_ok:
                logger.warning("Password change rejected for user %s: wrong current password", user_id)
                raise AuthError(message="Current password is incorrect")

            user.password_hash = await asyncio.to_thread(
                hash_password, payload.new_password, config.bcrypt_rounds
            )
            await db.flush()
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error changing password for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not change your password. Please try again.",
                context={"user_id": str(user_id)},
            )

        logger.info("User %s changed password", user_id)

    async def logout(self, claims: TokenClaims) -> None:
        """
        Tokens are stateless, so there is nothing to revoke server-side; the
        client discards its copy. The event is still logged for auditing.
        """
        logger.info("User %s logged out", claims.id)


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
