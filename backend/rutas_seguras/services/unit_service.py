"""
Rutas Seguras Backend — Unit Service (Fleet Management)
=======================================================

What:  CRUD over fleet vehicles.
Who:   Called by /api/units handlers.

Plates are unique across every row, inactive ones included. The duplicate
check runs before the write, and a race that slips past it is caught at
flush time and reported the same way (409).
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    RutasSegurasError,
    ValidationError,
)
from rutas_seguras.models.route import Route
from rutas_seguras.models.unit import Unit
from rutas_seguras.schemas.unit import (
    UnitCreateRequest,
    UnitListResponse,
    UnitResponse,
    UnitUpdateRequest,
)
from rutas_seguras.services.pagination import PageRequest, paginate

logger = logging.getLogger(__name__)

DUPLICATE_PLATE_MESSAGE = "A unit with this plate already exists"


class UnitService:

    async def _get_active_unit(self, db: AsyncSession, unit_id: UUID) -> Unit:
        result = await db.execute(
            select(Unit).where(Unit.id == unit_id, Unit.active.is_(True))
        )
        unit = result.scalar_one_or_none()
        if unit is None:
            raise NotFoundError(resource="unit", resource_id=str(unit_id))
        return unit

    async def _check_plate_free(
        self, db: AsyncSession, plate: str, exclude_id: Optional[UUID] = None
    ) -> None:
        query = select(Unit.id).where(Unit.plate == plate)
        if exclude_id is not None:
            query = query.where(Unit.id != exclude_id)
        if (await db.execute(query)).scalar_one_or_none() is not None:
            raise ConflictError(message=DUPLICATE_PLATE_MESSAGE, field="plate")

    async def _check_route(self, db: AsyncSession, changes: Dict[str, Any]) -> None:
        route_id = changes.get("current_route_id")
        if route_id is None:
            return
        found = await db.execute(
            select(Route.id).where(Route.id == route_id, Route.active.is_(True))
        )
        if found.scalar_one_or_none() is None:
            raise ValidationError(
                message=f"Route '{route_id}' does not exist",
                field="current_route_id",
            )

    async def _flush(self, db: AsyncSession) -> None:
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(message=DUPLICATE_PLATE_MESSAGE, field="plate")

    async def list_units(
        self, db: AsyncSession, page: PageRequest, status: Optional[str] = None
    ) -> UnitListResponse:
        try:
            query = select(Unit).where(Unit.active.is_(True))
            if status:
                query = query.where(Unit.status == status)
            query = query.order_by(Unit.created_at.desc(), Unit.id)

            units, pagination = await paginate(db, query, page)
            return UnitListResponse(
                units=[UnitResponse.model_validate(u) for u in units],
                pagination=pagination,
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing units: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve units. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_unit(self, db: AsyncSession, unit_id: UUID) -> UnitResponse:
        try:
            return UnitResponse.model_validate(await self._get_active_unit(db, unit_id))
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching unit %s: %s", unit_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the unit. Please try again.",
                context={"unit_id": str(unit_id)},
            )

    async def create_unit(self, db: AsyncSession, payload: UnitCreateRequest) -> UnitResponse:
        """
        Raises:
            ConflictError:   Plate already registered (→ 409)
            ValidationError: Unknown current_route_id (→ 400)
        """
        data = payload.model_dump()
        try:
            await self._check_plate_free(db, payload.plate)
            await self._check_route(db, data)

            unit = Unit(**data)
            db.add(unit)
            await self._flush(db)

            logger.info("Unit created: %s (plate=%s)", unit.id, unit.plate)
            return UnitResponse.model_validate(unit)

        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating unit: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the unit. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def update_unit(
        self, db: AsyncSession, unit_id: UUID, payload: UnitUpdateRequest
    ) -> UnitResponse:
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError(message="No fields provided to update")

        try:
            unit = await self._get_active_unit(db, unit_id)
            if "plate" in changes and changes["plate"] != unit.plate:
                await self._check_plate_free(db, changes["plate"], exclude_id=unit.id)
            await self._check_route(db, changes)

            for field, value in changes.items():
                setattr(unit, field, value)
            await self._flush(db)

            logger.info("Unit %s updated (fields: %s)", unit_id, ", ".join(sorted(changes)))
            return UnitResponse.model_validate(unit)

        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating unit %s: %s", unit_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the unit. Please try again.",
                context={"unit_id": str(unit_id)},
            )

    async def delete_unit(self, db: AsyncSession, unit_id: UUID) -> None:
        try:
            unit = await self._get_active_unit(db, unit_id)
            unit.active = False
            await db.flush()
            logger.info("Unit %s deactivated", unit_id)
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting unit %s: %s", unit_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the unit. Please try again.",
                context={"unit_id": str(unit_id)},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
unit_service = UnitService()
