"""
Rutas Seguras — Alembic Migration Environment
=============================================

What:  Runs the schema migrations for users, routes, units and contacts
       against the database named by DATABASE_URL.
How:   Builds an async engine from `rutas_seguras.config.settings` and runs
       the migration context inside `connection.run_sync()`.
Who:   The `alembic` CLI (upgrade, downgrade, revision --autogenerate).

SQLite:
    Local SQLite databases cannot ALTER most constraints in place, so
    migrations run in batch mode there. PostgreSQL runs them directly.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from rutas_seguras.config import settings
from rutas_seguras.database import Base

# Registers every table on Base.metadata for --autogenerate
from rutas_seguras.models import contact, route, unit, user  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=settings.is_sqlite,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the SQL to stdout instead of executing it (`alembic upgrade --sql`)."""
    _configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    # One-shot run: no pool to keep around afterwards
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
