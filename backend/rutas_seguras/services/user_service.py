"""
Rutas Seguras Backend — User Service (Account Administration)
=============================================================

What:  Admin CRUD over user accounts, the driver lookup, and the shared
       `insert_user` used by self-registration.
Why:   Email uniqueness, password hashing and soft delete are enforced in one
       place for both the admin path and the public registration path.
Who:   Called by /api/users handlers and by AuthService.

Soft delete:
    DELETE sets active = False. Inactive users are hidden from the default
    list and from the driver lookup, cannot log in, and keep their email
    reserved. Admins can still fetch and update them by id to reactivate.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.config import Settings
from rutas_seguras.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    RutasSegurasError,
    ValidationError,
)
from rutas_seguras.models.user import User
from rutas_seguras.schemas.user import (
    UserCollection,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from rutas_seguras.security import hash_password
from rutas_seguras.services.pagination import PageRequest, paginate

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "A user with this email already exists"


class UserService:
    """
    Business logic for user accounts.

    Responsibilities:
        - insert_user(): uniqueness check + bcrypt hash + insert
        - list_users() / list_drivers() / get_user()
        - create_user() / update_user() / delete_user()
    """

    async def insert_user(
        self,
        db: AsyncSession,
        config: Settings,
        *,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        role: str = "cliente",
        active: bool = True,
    ) -> User:
        """
        Persist a new user after checking the email is free.

        The check matches the email exactly against every stored row,
        soft-deleted ones included. When the email is taken nothing is
        written. A duplicate that slips in between the check and the insert
        is caught at flush time and reported the same way.

        Raises:
            ConflictError: Email already registered (→ 409)
        """
        existing = await db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            logger.info("Rejected duplicate registration for an existing email")
            raise ConflictError(message=DUPLICATE_EMAIL_MESSAGE, field="email")

        # bcrypt is deliberately slow; keep it off the event loop
        password_hash = await asyncio.to_thread(hash_password, password, config.bcrypt_rounds)

        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            phone=phone,
            role=role,
            active=active,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(message=DUPLICATE_EMAIL_MESSAGE, field="email")

        logger.info("User created: %s (role=%s)", user.id, user.role)
        return user

    async def get_user_row(
        self, db: AsyncSession, user_id: UUID, include_inactive: bool = True
    ) -> User:
        query = select(User).where(User.id == user_id)
        if not include_inactive:
            query = query.where(User.active.is_(True))
        user = (await db.execute(query)).scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def list_users(
        self,
        db: AsyncSession,
        page: PageRequest,
        role: Optional[str] = None,
        include_inactive: bool = False,
    ) -> UserListResponse:
        try:
            query = select(User)
            if role:
                query = query.where(User.role == role)
            if not include_inactive:
                query = query.where(User.active.is_(True))
            query = query.order_by(User.created_at.desc(), User.id)

            users, pagination = await paginate(db, query, page)
            return UserListResponse(
                users=[UserResponse.model_validate(u) for u in users],
                pagination=pagination,
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_drivers(self, db: AsyncSession) -> UserCollection:
        """Active conductors, alphabetical, for route assignment pickers."""
        try:
            result = await db.execute(
                select(User)
                .where(User.role == "conductor", User.active.is_(True))
                .order_by(User.name)
            )
            return UserCollection(
                users=[UserResponse.model_validate(u) for u in result.scalars().all()]
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing drivers: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve drivers. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_user(self, db: AsyncSession, user_id: UUID) -> UserResponse:
        try:
            return UserResponse.model_validate(await self.get_user_row(db, user_id))
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"user_id": str(user_id)},
            )

    async def create_user(
        self, db: AsyncSession, config: Settings, payload: UserCreateRequest
    ) -> UserResponse:
        try:
            user = await self.insert_user(
                db,
                config,
                name=payload.name,
                email=payload.email,
                password=payload.password,
                phone=payload.phone,
                role=payload.role,
                active=payload.active,
            )
            return UserResponse.model_validate(user)
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the user. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def update_user(
        self, db: AsyncSession, config: Settings, user_id: UUID, payload: UserUpdateRequest
    ) -> UserResponse:
        """
        Apply a partial update.

        Raises:
            ValidationError: Empty body (→ 400)
            NotFoundError:   Unknown id (→ 404)
            ConflictError:   Email taken by another user (→ 409)
        """
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError(message="No fields provided to update")

        try:
            user = await self.get_user_row(db, user_id)

            new_email = changes.get("email")
            if new_email is not None and new_email != user.email:
                clash = await db.execute(
                    select(User.id).where(User.email == new_email, User.id != user.id)
                )
                if clash.scalar_one_or_none() is not None:
                    raise ConflictError(message=DUPLICATE_EMAIL_MESSAGE, field="email")

            password = changes.pop("password", None)
            if password is not None:
                user.password_hash = await asyncio.to_thread(
                    hash_password, password, config.bcrypt_rounds
                )

            for field, value in changes.items():
                setattr(user, field, value)

            try:
                await db.flush()
            except IntegrityError:
                await db.rollback()
                raise ConflictError(message=DUPLICATE_EMAIL_MESSAGE, field="email")

            logger.info(
                "User %s updated (fields: %s)", user.id, ", ".join(sorted(payload.model_fields_set))
            )
            return UserResponse.model_validate(user)

        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the user. Please try again.",
                context={"user_id": str(user_id)},
            )

    async def delete_user(self, db: AsyncSession, user_id: UUID, acting_user_id: UUID) -> None:
        """
        Soft-delete a user.

        Raises:
            ValidationError: An admin tried to delete their own account (→ 400)
            NotFoundError:   Unknown or already inactive id (→ 404)
        """
        if user_id == acting_user_id:
            raise ValidationError(message="You cannot delete your own account", field="id")

        try:
            user = await self.get_user_row(db, user_id, include_inactive=False)
            user.active = False
            await db.flush()
            logger.info("User %s deactivated by %s", user_id, acting_user_id)
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the user. Please try again.",
                context={"user_id": str(user_id)},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
