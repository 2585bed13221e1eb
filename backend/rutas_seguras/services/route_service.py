"""
Rutas Seguras Backend — Route Service (Search & CRUD)
=====================================================

What:  Public route search, popularity ranking, origin/destination
       suggestions, driver assignments and admin CRUD.
Why:   Search is the main public feature of the site; admins maintain the
       catalogue behind it.
Who:   Called by /api/routes handlers.

Search Semantics:
    GET /api/routes/search?origin=Centro&destination=Norte&page=1

    WHERE active
      AND (origin ILIKE '%Centro%' OR destination ILIKE '%Norte%')
    ORDER BY created_at DESC
    LIMIT :page_size OFFSET (:page - 1) * :page_size

    Both terms are required. A route matches when either column contains its
    term, so a search also surfaces routes that share only the origin or only
    the destination. User input is escaped before it goes into the LIKE
    pattern, so '%' and '_' match literally. There is no ranking or fuzzy
    matching. Each route on the returned page gets search_count + 1 in one
    UPDATE, which feeds GET /api/routes/popular. That UPDATE leaves
    updated_at alone; a search is not an edit.

Soft Delete:
    DELETE sets active = False. An inactive route answers 404 everywhere and
    never shows up in search, popular, suggestions or lists.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.exceptions import (
    DatabaseError,
    NotFoundError,
    RutasSegurasError,
    ValidationError,
)
from rutas_seguras.models.route import Route
from rutas_seguras.models.unit import Unit
from rutas_seguras.models.user import User
from rutas_seguras.schemas.route import (
    RouteCollection,
    RouteCreateRequest,
    RouteListResponse,
    RouteResponse,
    RouteSearchResponse,
    RouteUpdateRequest,
    SearchQuery,
    SuggestionsResponse,
)
from rutas_seguras.services.pagination import PageRequest, paginate

logger = logging.getLogger(__name__)

POPULAR_DEFAULT_LIMIT = 10
POPULAR_MAX_LIMIT = 50

SUGGESTION_COLUMNS = {
    "origins": Route.origin,
    "destinations": Route.destination,
}


def like_pattern(term: str) -> str:
    """Wrap a user term in %...% with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return POPULAR_DEFAULT_LIMIT
    return max(1, min(limit, POPULAR_MAX_LIMIT))


class RouteService:
    """
    Business logic for transit routes.

    Responsibilities:
        - search() / popular() / suggestions(): public reads
        - assigned(): a driver's own routes
        - list_routes() / get_route(): catalogue reads
        - create_route() / update_route() / delete_route(): admin writes
    """

    # ── Public reads ──────────────────────────────────────────────────────

    async def search(
        self,
        db: AsyncSession,
        origin: str,
        destination: str,
        page: PageRequest,
    ) -> RouteSearchResponse:
        """
        Case-insensitive substring search on origin or destination.

        Args:
            db:          Async database session
            origin:      Substring to match on the origin column
            destination: Substring to match on the destination column
            page:        Requested page, clamped into [1, max_page]

        Returns:
            RouteSearchResponse with the page of routes, pagination and the
            echoed query

        Raises:
            ValidationError: origin or destination blank after trimming (→ 400)
        """
        origin = (origin or "").strip()
        destination = (destination or "").strip()
        for field, term in (("origin", origin), ("destination", destination)):
            if not term:
                raise ValidationError(
                    message="Provide both an origin and a destination to search",
                    field=field,
                )

        try:
            query = (
                select(Route)
                .where(
                    Route.active.is_(True),
                    or_(
                        Route.origin.ilike(like_pattern(origin), escape="\\"),
                        Route.destination.ilike(like_pattern(destination), escape="\\"),
                    ),
                )
                .order_by(Route.created_at.desc(), Route.id)
            )

            routes, pagination = await paginate(db, query, page)
            items = [RouteResponse.model_validate(r) for r in routes]

            if routes:
                await db.execute(
                    update(Route)
                    .where(Route.id.in_([r.id for r in routes]))
                    .values(search_count=Route.search_count + 1, updated_at=Route.updated_at)
                    .execution_options(synchronize_session=False)
                )

            logger.info(
                "Route search origin=%r destination=%r page=%d -> %d of %d",
                origin, destination, pagination.current_page, len(items), pagination.total_items,
            )
            return RouteSearchResponse(
                routes=items,
                pagination=pagination,
                query=SearchQuery(origin=origin, destination=destination),
            )

        except SQLAlchemyError as e:
            logger.error("Database error searching routes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not search routes. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def popular(self, db: AsyncSession, limit: Optional[int] = None) -> RouteCollection:
        """Most-searched active routes, ties broken newest first."""
        try:
            result = await db.execute(
                select(Route)
                .where(Route.active.is_(True))
                .order_by(Route.search_count.desc(), Route.created_at.desc(), Route.id)
                .limit(clamp_limit(limit))
            )
            return RouteCollection(
                routes=[RouteResponse.model_validate(r) for r in result.scalars().all()]
            )
        except SQLAlchemyError as e:
            logger.error("Database error loading popular routes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve popular routes. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def suggestions(
        self, db: AsyncSession, kind: str, q: Optional[str] = None
    ) -> SuggestionsResponse:
        """
        Distinct origins or destinations among active routes, ascending.

        Args:
            kind: "origins" or "destinations"
            q:    Optional substring filter
        """
        column = SUGGESTION_COLUMNS[kind]
        try:
            query = select(column).where(Route.active.is_(True)).distinct().order_by(column)
            if q and q.strip():
                query = query.where(column.ilike(like_pattern(q.strip()), escape="\\"))
            result = await db.execute(query)
            return SuggestionsResponse(suggestions=list(result.scalars().all()))
        except SQLAlchemyError as e:
            logger.error("Database error loading %s suggestions: %s", kind, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve suggestions. Please try again.",
                context={"kind": kind},
            )

    async def assigned(self, db: AsyncSession, driver_id: UUID) -> RouteCollection:
        """Active routes whose assigned driver is `driver_id`."""
        try:
            result = await db.execute(
                select(Route)
                .where(Route.active.is_(True), Route.assigned_driver_id == driver_id)
                .order_by(Route.created_at.desc(), Route.id)
            )
            return RouteCollection(
                routes=[RouteResponse.model_validate(r) for r in result.scalars().all()]
            )
        except SQLAlchemyError as e:
            logger.error("Database error loading routes for driver %s: %s", driver_id, str(e))
            raise DatabaseError(
                message="Could not retrieve your routes. Please try again.",
                context={"driver_id": str(driver_id)},
            )

    # ── Catalogue reads ───────────────────────────────────────────────────

    async def list_routes(
        self, db: AsyncSession, page: PageRequest, status: Optional[str] = None
    ) -> RouteListResponse:
        try:
            query = select(Route).where(Route.active.is_(True))
            if status:
                query = query.where(Route.status == status)
            query = query.order_by(Route.created_at.desc(), Route.id)

            routes, pagination = await paginate(db, query, page)
            return RouteListResponse(
                routes=[RouteResponse.model_validate(r) for r in routes],
                pagination=pagination,
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing routes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve routes. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _get_active_route(self, db: AsyncSession, route_id: UUID) -> Route:
        result = await db.execute(
            select(Route).where(Route.id == route_id, Route.active.is_(True))
        )
        route = result.scalar_one_or_none()
        if route is None:
            raise NotFoundError(resource="route", resource_id=str(route_id))
        return route

    async def get_route(self, db: AsyncSession, route_id: UUID) -> RouteResponse:
        try:
            return RouteResponse.model_validate(await self._get_active_route(db, route_id))
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching route %s: %s", route_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the route. Please try again.",
                context={"route_id": str(route_id)},
            )

    # ── Admin writes ──────────────────────────────────────────────────────

    async def _check_assignments(self, db: AsyncSession, changes: Dict[str, Any]) -> None:
        """
        Verify that referenced unit/driver rows exist before writing.

        A null (or absent) reference is always fine. A driver must be an
        active user with role 'conductor'.

        Raises:
            ValidationError: Reference points at nothing usable (→ 400)
        """
        unit_id = changes.get("assigned_unit_id")
        if unit_id is not None:
            found = await db.execute(
                select(Unit.id).where(Unit.id == unit_id, Unit.active.is_(True))
            )
            if found.scalar_one_or_none() is None:
                raise ValidationError(
                    message=f"Unit '{unit_id}' does not exist",
                    field="assigned_unit_id",
                )

        driver_id = changes.get("assigned_driver_id")
        if driver_id is not None:
            found = await db.execute(
                select(User.role).where(User.id == driver_id, User.active.is_(True))
            )
            role = found.scalar_one_or_none()
            if role is None:
                raise ValidationError(
                    message=f"Driver '{driver_id}' does not exist",
                    field="assigned_driver_id",
                )
            if role != "conductor":
                raise ValidationError(
                    message="Assigned driver must have the 'conductor' role",
                    field="assigned_driver_id",
                )

    async def create_route(
        self, db: AsyncSession, payload: RouteCreateRequest, created_by_id: UUID
    ) -> RouteResponse:
        """
        Raises:
            ValidationError: Unknown unit or driver reference (→ 400)
        """
        data = payload.model_dump()
        try:
            await self._check_assignments(db, data)

            route = Route(**data, created_by_id=created_by_id)
            db.add(route)
            await db.flush()

            logger.info(
                "Route created: %s ('%s' -> '%s') by %s",
                route.id, route.origin, route.destination, created_by_id,
            )
            return RouteResponse.model_validate(route)

        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating route: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the route. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def update_route(
        self, db: AsyncSession, route_id: UUID, payload: RouteUpdateRequest
    ) -> RouteResponse:
        """
        Partial update; only fields present in the body change.

        Raises:
            ValidationError: Empty body, or unknown unit/driver reference (→ 400)
            NotFoundError:   Unknown or soft-deleted route (→ 404)
        """
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError(message="No fields provided to update")

        try:
            route = await self._get_active_route(db, route_id)
            await self._check_assignments(db, changes)

            for field, value in changes.items():
                setattr(route, field, value)
            await db.flush()

            logger.info("Route %s updated (fields: %s)", route_id, ", ".join(sorted(changes)))
            return RouteResponse.model_validate(route)

        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating route %s: %s", route_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the route. Please try again.",
                context={"route_id": str(route_id)},
            )

    async def delete_route(self, db: AsyncSession, route_id: UUID) -> None:
        try:
            route = await self._get_active_route(db, route_id)
            route.active = False
            await db.flush()
            logger.info("Route %s deactivated", route_id)
        except RutasSegurasError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting route %s: %s", route_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the route. Please try again.",
                context={"route_id": str(route_id)},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
route_service = RouteService()
