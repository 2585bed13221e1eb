"""
Rutas Seguras Backend — Unit SQLAlchemy Model
=============================================

What:  ORM model representing the `units` table (fleet vehicles).
Who:   Used by UnitService; read by RouteService when validating
       unit assignments.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from rutas_seguras.database import Base

UNIT_STATUSES = ("disponible", "en ruta", "mantenimiento", "inactivo")


class Unit(Base):
    """
    A vehicle in the fleet.

    The plate is unique across all rows, soft-deleted ones included.
    `current_route_id` points back at routes, closing a routes <-> units
    reference cycle; the routes side is created with use_alter so either
    table can be created first.
    """

    __tablename__ = "units"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    plate: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    brand: Mapped[str] = mapped_column(String(60), nullable=False)
    model: Mapped[str] = mapped_column(String(60), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="disponible",
        server_default=text("'disponible'"),
    )

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    current_route_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("routes.id", name="fk_units_current_route"),
        nullable=True,
    )

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

    __table_args__ = (
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in UNIT_STATUSES) + ")",
            name="ck_units_status",
        ),
        CheckConstraint("capacity BETWEEN 1 AND 500", name="ck_units_capacity"),
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, plate='{self.plate}', status='{self.status}')>"
