"""Create users, units, routes and contacts tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the four core tables of the transportation API.
How:   PostgreSQL-specific features: UUID primary keys defaulting to
       gen_random_uuid(), TIMESTAMP WITH TIME ZONE, JSONB for stops/schedule.

routes.assigned_unit_id → units.id and units.current_route_id → routes.id
reference each other, so units is created first and the units → routes
foreign key is added once routes exists.

Rollback: downgrade() drops all four tables (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp_columns() -> list:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        _id_column(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="bcrypt hash; never serialized",
        ),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'cliente'")),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint("role IN ('admin', 'conductor', 'cliente')", name="ck_users_role"),
    )
    op.create_index("idx_users_role_active", "users", ["role", "active"])

    # ── units (route FK added below) ──────────────────────────────────────
    op.create_table(
        "units",
        _id_column(),
        sa.Column("plate", sa.String(20), nullable=False),
        sa.Column("brand", sa.String(60), nullable=False),
        sa.Column("model", sa.String(60), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'disponible'")),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("current_route_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("plate", name="uq_units_plate"),
        sa.CheckConstraint(
            "status IN ('disponible', 'en ruta', 'mantenimiento', 'inactivo')",
            name="ck_units_status",
        ),
        sa.CheckConstraint("capacity BETWEEN 1 AND 500", name="ck_units_capacity"),
    )

    # ── routes ────────────────────────────────────────────────────────────
    op.create_table(
        "routes",
        _id_column(),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column("origin", sa.String(255), nullable=False),
        sa.Column("destination", sa.String(255), nullable=False),
        sa.Column("stops", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("schedule", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("distance_km", sa.Integer(), nullable=False),
        sa.Column("duration", sa.String(50), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'activo'")),
        sa.Column("assigned_unit_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("assigned_driver_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("search_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["assigned_unit_id"], ["units.id"], name="fk_routes_assigned_unit"),
        sa.ForeignKeyConstraint(["assigned_driver_id"], ["users.id"], name="fk_routes_assigned_driver"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], name="fk_routes_created_by"),
        sa.CheckConstraint(
            "status IN ('activo', 'en curso', 'finalizado', 'inactivo')",
            name="ck_routes_status",
        ),
        sa.CheckConstraint("distance_km >= 0", name="ck_routes_distance"),
    )
    # Search lists active routes newest first
    op.create_index(
        "idx_routes_active_created_at",
        "routes",
        ["active", sa.text("created_at DESC")],
    )
    op.create_index("idx_routes_assigned_driver", "routes", ["assigned_driver_id"])

    op.create_foreign_key(
        "fk_units_current_route",
        "units",
        "routes",
        ["current_route_id"],
        ["id"],
    )

    # ── contacts ──────────────────────────────────────────────────────────
    op.create_table(
        "contacts",
        _id_column(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_contacts_created_at", "contacts", [sa.text("created_at DESC")])


def downgrade() -> None:
    """
    Drop all four tables.

    WARNING: destructive. In production, prefer a forward migration that
    archives data first.
    """
    op.drop_index("idx_contacts_created_at", table_name="contacts")
    op.drop_table("contacts")

    op.drop_constraint("fk_units_current_route", "units", type_="foreignkey")

    op.drop_index("idx_routes_assigned_driver", table_name="routes")
    op.drop_index("idx_routes_active_created_at", table_name="routes")
    op.drop_table("routes")

    op.drop_table("units")

    op.drop_index("idx_users_role_active", table_name="users")
    op.drop_table("users")
