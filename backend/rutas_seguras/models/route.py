"""
Rutas Seguras Backend — Route SQLAlchemy Model
==============================================

What:  ORM model representing the `routes` table (a named transit path).
Who:   Used by RouteService for search, CRUD, suggestions and popularity.

Table Design Rationale:
    - stops / schedule: JSON columns. They are always read and written as a
      whole with the route and never queried on their own.
    - assigned_unit_id / assigned_driver_id: plain foreign keys, no cascade.
    - search_count: bumped each time the route appears in a search result;
      feeds the "popular routes" listing.
    - active: soft-delete flag. Inactive routes are invisible to every read.
    - status: activo | en curso | finalizado | inactivo, unconstrained
      transitions.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from rutas_seguras.database import Base

ROUTE_STATUSES = ("activo", "en curso", "finalizado", "inactivo")


class Route(Base):
    """
    A transit path from origin to destination.

    Query Patterns:
        - Search: WHERE active AND (lower(origin) LIKE ... OR lower(destination) LIKE ...)
          ORDER BY created_at DESC LIMIT :page_size OFFSET :offset
        - Popular: WHERE active ORDER BY search_count DESC
        - Assigned: WHERE active AND assigned_driver_id = :driver
    """

    __tablename__ = "routes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(150), nullable=False)
    origin: Mapped[str] = mapped_column(String(255), nullable=False)
    destination: Mapped[str] = mapped_column(String(255), nullable=False)

    stops: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # [{"day": "lunes", "time": "07:30"}, ...]
    schedule: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    distance_km: Mapped[int] = mapped_column(Integer, nullable=False)
    duration: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="activo",
        server_default=text("'activo'"),
    )

    assigned_unit_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("units.id", use_alter=True, name="fk_routes_assigned_unit"),
        nullable=True,
    )

    assigned_driver_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", name="fk_routes_assigned_driver"),
        nullable=True,
    )

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", name="fk_routes_created_by"),
        nullable=True,
    )

    search_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
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
        Index("idx_routes_active_created_at", "active", created_at.desc()),
        Index("idx_routes_assigned_driver", "assigned_driver_id"),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in ROUTE_STATUSES) + ")",
            name="ck_routes_status",
        ),
        CheckConstraint("distance_km >= 0", name="ck_routes_distance"),
    )

    def __repr__(self) -> str:
        return (
            f"<Route(id={self.id}, '{self.origin}' -> '{self.destination}', "
            f"status='{self.status}')>"
        )
