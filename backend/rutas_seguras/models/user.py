"""
Rutas Seguras Backend — User SQLAlchemy Model
=============================================

What:  ORM model representing the `users` table.
Who:   Used by AuthService and UserService; read by RouteService when
       validating driver assignments.

Table Design Rationale:
    - email: globally unique (unique index). Soft-deleted users keep their
      email reserved.
    - password_hash: bcrypt output only; plaintext never reaches this table,
      and response schemas never declare this column.
    - role: admin | conductor | cliente, stored as a short string.
    - active: soft-delete flag. Inactive users cannot log in and vanish from
      public reads.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from rutas_seguras.database import Base

USER_ROLES = ("admin", "conductor", "cliente")


class User(Base):
    """
    An account for any of the three roles.

    Lifecycle:
        1. Created by self-registration or by an admin
        2. Mutated by profile updates (name, phone, password) or admin edits
        3. Soft-deleted by an admin (active = False)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash; never serialized",
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="cliente",
        server_default=text("'cliente'"),
    )

    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Driver lookups filter on role + active for the assignment dropdown
    __table_args__ = (
        Index("idx_users_role_active", "role", "active"),
        CheckConstraint(
            "role IN (" + ", ".join(f"'{r}'" for r in USER_ROLES) + ")",
            name="ck_users_role",
        ),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}', active={self.active})>"
