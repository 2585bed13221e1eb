"""
Rutas Seguras Backend — Dashboard Stats Service
===============================================

What:  Row counts for the dashboard: active users, routes and units, and all
       contact messages.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.exceptions import DatabaseError
from rutas_seguras.models.contact import Contact
from rutas_seguras.models.route import Route
from rutas_seguras.models.unit import Unit
from rutas_seguras.models.user import User
from rutas_seguras.schemas.stats import StatsResponse

logger = logging.getLogger(__name__)


class StatsService:

    async def get_stats(self, db: AsyncSession) -> StatsResponse:
        try:
            users = await db.scalar(
                select(func.count(User.id)).where(User.active.is_(True))
            )
            routes = await db.scalar(
                select(func.count(Route.id)).where(Route.active.is_(True))
            )
            units = await db.scalar(
                select(func.count(Unit.id)).where(Unit.active.is_(True))
            )
            contacts = await db.scalar(select(func.count(Contact.id)))
        except SQLAlchemyError as e:
            logger.error("Database error computing stats: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not compute statistics. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return StatsResponse(
            users=users or 0,
            routes=routes or 0,
            units=units or 0,
            contacts=contacts or 0,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
stats_service = StatsService()
