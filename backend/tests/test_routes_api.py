"""
Rutas Seguras Backend — Route Endpoint Tests
============================================

What:  HTTP-level tests for /api/routes: search, pagination, popularity,
       suggestions, assignments and admin CRUD with role gating.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from conftest import bearer, create_route, reload
from rutas_seguras.models.route import Route


def route_payload(**overrides):
    payload = {
        "title": "Centro - Norte",
        "origin": "Centro",
        "destination": "Norte",
        "distance_km": 15,
        "stops": ["Alameda", "Reforma"],
        "schedule": [{"day": "lunes", "time": "07:30"}],
    }
    payload.update(overrides)
    return payload


SEARCH = {"origin": "Centro", "destination": "Norte"}


class TestSearch:

    @pytest.mark.asyncio
    async def test_search_counts_only_matching_active_routes(self, test_client, db_session):
        await create_route(db_session, origin="Centro", destination="Norte")
        await create_route(db_session, origin="Centro Histórico", destination="Norte Industrial")
        await create_route(db_session, origin="Oeste", destination="Sur")
        await create_route(db_session, origin="Centro", destination="Norte", active=False)

        response = await test_client.get("/api/routes/search", params={**SEARCH, "page": 1})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["pagination"]["total_items"] == 2
        assert len(data["routes"]) == 2
        assert data["query"] == {"origin": "Centro", "destination": "Norte"}

    @pytest.mark.asyncio
    async def test_either_term_is_enough_to_match(self, test_client, db_session):
        await create_route(db_session, title="Sale del centro", origin="Centro", destination="Sur")
        await create_route(db_session, title="Llega al norte", origin="Oeste", destination="Norte")
        await create_route(db_session, title="Ninguna", origin="Oeste", destination="Sur")

        response = await test_client.get("/api/routes/search", params=SEARCH)

        data = response.json()["data"]
        assert data["pagination"]["total_items"] == 2
        assert sorted(r["title"] for r in data["routes"]) == ["Llega al norte", "Sale del centro"]

    @pytest.mark.asyncio
    async def test_each_term_matches_its_own_column_only(self, test_client, db_session):
        await create_route(db_session, origin="Norte", destination="Centro")

        response = await test_client.get("/api/routes/search", params=SEARCH)

        assert response.json()["data"]["pagination"]["total_items"] == 0

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_substring(self, test_client, db_session):
        await create_route(db_session, origin="Terminal CENTRO", destination="Aeropuerto")

        response = await test_client.get(
            "/api/routes/search", params={"origin": "centro", "destination": "Playa"}
        )

        assert response.json()["data"]["pagination"]["total_items"] == 1

    @pytest.mark.asyncio
    async def test_like_wildcards_are_literal(self, test_client, db_session):
        await create_route(db_session, origin="Centro", destination="Norte")

        response = await test_client.get(
            "/api/routes/search", params={"origin": "%%", "destination": "__"}
        )

        assert response.json()["data"]["pagination"]["total_items"] == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [
            {},
            {"origin": "Centro"},
            {"destination": "Norte"},
            {"origin": "C", "destination": "Norte"},
            {"origin": "Centro", "destination": "N"},
        ],
        ids=["none", "origin-only", "destination-only", "short-origin", "short-destination"],
    )
    async def test_both_terms_are_required(self, test_client, params):
        response = await test_client.get("/api/routes/search", params=params)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_search_newest_first(self, test_client, db_session):
        now = datetime.now(timezone.utc)
        await create_route(db_session, title="Vieja", created_at=now - timedelta(days=2))
        await create_route(db_session, title="Nueva", created_at=now)

        response = await test_client.get("/api/routes/search", params=SEARCH)

        titles = [r["title"] for r in response.json()["data"]["routes"]]
        assert titles == ["Nueva", "Vieja"]

    @pytest.mark.asyncio
    async def test_search_bumps_search_count(self, app, test_client, db_session):
        route = await create_route(db_session)

        await test_client.get("/api/routes/search", params=SEARCH)
        await test_client.get("/api/routes/search", params=SEARCH)

        assert (await reload(app, Route, route.id)).search_count == 2

    @pytest.mark.asyncio
    async def test_search_leaves_updated_at_alone(self, app, test_client, db_session):
        edited = datetime(2024, 1, 1, tzinfo=timezone.utc)
        route = await create_route(db_session, created_at=edited, updated_at=edited)

        await test_client.get("/api/routes/search", params=SEARCH)

        stored = await reload(app, Route, route.id)
        assert stored.search_count == 1
        assert stored.updated_at.replace(tzinfo=timezone.utc) == edited


class TestSearchPagination:

    @pytest.fixture
    def app_settings(self, app_settings):
        return app_settings.model_copy(update={"page_size": 2, "max_page": 50})

    async def seed(self, db_session, count):
        for i in range(count):
            await create_route(db_session, title=f"Ruta {i}")

    @pytest.mark.asyncio
    async def test_total_pages_is_ceiling(self, test_client, db_session):
        await self.seed(db_session, 5)

        response = await test_client.get("/api/routes/search", params=SEARCH)

        pagination = response.json()["data"]["pagination"]
        assert pagination == {
            "current_page": 1,
            "total_pages": 3,
            "total_items": 5,
            "items_per_page": 2,
        }

    @pytest.mark.asyncio
    async def test_list_endpoints_use_the_app_page_size(
        self, test_client, db_session, cliente_token
    ):
        await self.seed(db_session, 3)

        response = await test_client.get("/api/routes", headers=bearer(cliente_token))

        pagination = response.json()["data"]["pagination"]
        assert pagination["items_per_page"] == 2
        assert pagination["total_pages"] == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page", [0, -1, -50])
    async def test_non_positive_page_clamps_to_first(self, test_client, db_session, page):
        await self.seed(db_session, 3)

        response = await test_client.get("/api/routes/search", params={**SEARCH, "page": page})

        data = response.json()["data"]
        assert data["pagination"]["current_page"] == 1
        assert len(data["routes"]) == 2

    @pytest.mark.asyncio
    async def test_page_beyond_last_is_empty_with_correct_totals(self, test_client, db_session):
        await self.seed(db_session, 3)

        response = await test_client.get("/api/routes/search", params={**SEARCH, "page": 7})

        data = response.json()["data"]
        assert data["routes"] == []
        assert data["pagination"]["total_items"] == 3
        assert data["pagination"]["total_pages"] == 2
        assert data["pagination"]["current_page"] == 7

    @pytest.mark.asyncio
    async def test_huge_page_clamps_to_max_page(self, test_client, db_session):
        await self.seed(db_session, 1)

        response = await test_client.get(
            "/api/routes/search", params={**SEARCH, "page": 999_999}
        )

        assert response.json()["data"]["pagination"]["current_page"] == 50

    @pytest.mark.asyncio
    async def test_no_matches_has_zero_pages(self, test_client):
        response = await test_client.get(
            "/api/routes/search", params={"origin": "Nada", "destination": "Nada"}
        )

        pagination = response.json()["data"]["pagination"]
        assert pagination["total_items"] == 0
        assert pagination["total_pages"] == 0

    @pytest.mark.asyncio
    async def test_last_page_holds_remainder(self, test_client, db_session):
        await self.seed(db_session, 5)

        response = await test_client.get("/api/routes/search", params={**SEARCH, "page": 3})

        assert len(response.json()["data"]["routes"]) == 1


class TestReads:

    @pytest.mark.asyncio
    async def test_popular_orders_by_search_count(self, test_client, db_session):
        await create_route(db_session, title="Poco", search_count=1)
        await create_route(db_session, title="Mucho", search_count=40)
        await create_route(db_session, title="Nada")
        await create_route(db_session, title="Borrada", search_count=99, active=False)

        response = await test_client.get("/api/routes/popular", params={"limit": 2})

        titles = [r["title"] for r in response.json()["data"]["routes"]]
        assert titles == ["Mucho", "Poco"]

    @pytest.mark.asyncio
    async def test_popular_limit_is_clamped(self, test_client, db_session):
        await create_route(db_session)

        response = await test_client.get("/api/routes/popular", params={"limit": 0})

        assert len(response.json()["data"]["routes"]) == 1

    @pytest.mark.asyncio
    async def test_origin_suggestions_are_distinct_and_sorted(self, test_client, db_session):
        await create_route(db_session, origin="Norte")
        await create_route(db_session, origin="Centro")
        await create_route(db_session, origin="Centro")
        await create_route(db_session, origin="Oculto", active=False)

        response = await test_client.get("/api/routes/suggestions/origins")

        assert response.json()["data"]["suggestions"] == ["Centro", "Norte"]

    @pytest.mark.asyncio
    async def test_destination_suggestions_filter(self, test_client, db_session):
        await create_route(db_session, destination="Norte")
        await create_route(db_session, destination="Sur")

        response = await test_client.get(
            "/api/routes/suggestions/destinations", params={"q": "no"}
        )

        assert response.json()["data"]["suggestions"] == ["Norte"]

    @pytest.mark.asyncio
    async def test_get_route_requires_sign_in(self, test_client, db_session, cliente_token):
        route = await create_route(db_session)

        anonymous = await test_client.get(f"/api/routes/{route.id}")
        assert anonymous.status_code == 401

        response = await test_client.get(f"/api/routes/{route.id}", headers=bearer(cliente_token))
        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(route.id)

    @pytest.mark.asyncio
    async def test_unknown_route_is_404(self, test_client, cliente_token):
        response = await test_client.get(f"/api/routes/{uuid4()}", headers=bearer(cliente_token))
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_malformed_route_id_is_400(self, test_client, cliente_token):
        response = await test_client.get("/api/routes/not-a-uuid", headers=bearer(cliente_token))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_requires_authentication(self, test_client, cliente_token):
        anonymous = await test_client.get("/api/routes")
        assert anonymous.status_code == 401

        response = await test_client.get("/api/routes", headers=bearer(cliente_token))
        assert response.status_code == 200
        assert "pagination" in response.json()["data"]


class TestAssigned:

    @pytest.mark.asyncio
    async def test_driver_sees_only_own_routes(
        self, test_client, db_session, conductor_user, conductor_token
    ):
        await create_route(db_session, title="Mia", assigned_driver_id=conductor_user.id)
        await create_route(db_session, title="Ajena")

        response = await test_client.get("/api/routes/assigned", headers=bearer(conductor_token))

        assert response.status_code == 200
        assert [r["title"] for r in response.json()["data"]["routes"]] == ["Mia"]

    @pytest.mark.asyncio
    async def test_cliente_is_forbidden(self, test_client, cliente_token):
        response = await test_client.get("/api/routes/assigned", headers=bearer(cliente_token))
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"


class TestAdminMutations:

    @pytest.mark.asyncio
    async def test_admin_creates_route(self, test_client, admin_user, admin_token):
        response = await test_client.post(
            "/api/routes", json=route_payload(), headers=bearer(admin_token)
        )

        assert response.status_code == 201
        route = response.json()["data"]
        assert route["created_by_id"] == str(admin_user.id)
        assert route["status"] == "activo"
        assert route["schedule"] == [{"day": "lunes", "time": "07:30"}]
        assert route["search_count"] == 0

    @pytest.mark.asyncio
    async def test_create_requires_token(self, test_client):
        response = await test_client.post("/api/routes", json=route_payload())
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_admin_create_is_forbidden_and_writes_nothing(
        self, test_client, cliente_token, conductor_token
    ):
        for token in (cliente_token, conductor_token):
            response = await test_client.post(
                "/api/routes", json=route_payload(), headers=bearer(token)
            )
            assert response.status_code == 403

        search = await test_client.get("/api/routes/search", params=SEARCH)
        assert search.json()["data"]["pagination"]["total_items"] == 0

    @pytest.mark.asyncio
    async def test_non_admin_update_is_forbidden_and_row_unchanged(
        self, app, test_client, db_session, cliente_token
    ):
        route = await create_route(db_session, title="Original")

        response = await test_client.patch(
            f"/api/routes/{route.id}", json={"title": "Hackeada"}, headers=bearer(cliente_token)
        )

        assert response.status_code == 403
        assert (await reload(app, Route, route.id)).title == "Original"

    @pytest.mark.asyncio
    async def test_non_admin_delete_is_forbidden_and_row_unchanged(
        self, app, test_client, db_session, conductor_token
    ):
        route = await create_route(db_session)

        response = await test_client.delete(
            f"/api/routes/{route.id}", headers=bearer(conductor_token)
        )

        assert response.status_code == 403
        assert (await reload(app, Route, route.id)).active is True

    @pytest.mark.asyncio
    async def test_admin_partial_update(self, test_client, db_session, admin_token):
        route = await create_route(db_session, duration="40 min")

        response = await test_client.put(
            f"/api/routes/{route.id}",
            json={"status": "en curso", "distance_km": 20},
            headers=bearer(admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "en curso"
        assert data["distance_km"] == 20
        assert data["duration"] == "40 min"

    @pytest.mark.asyncio
    async def test_assigning_non_driver_is_rejected(
        self, test_client, db_session, cliente_user, admin_token
    ):
        route = await create_route(db_session)

        response = await test_client.patch(
            f"/api/routes/{route.id}",
            json={"assigned_driver_id": str(cliente_user.id)},
            headers=bearer(admin_token),
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "assigned_driver_id"

    @pytest.mark.asyncio
    async def test_assigning_unknown_unit_is_rejected(self, test_client, admin_token):
        response = await test_client.post(
            "/api/routes",
            json=route_payload(assigned_unit_id=str(uuid4())),
            headers=bearer(admin_token),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_assign_then_clear_driver(
        self, test_client, db_session, conductor_user, admin_token
    ):
        route = await create_route(db_session)

        assigned = await test_client.patch(
            f"/api/routes/{route.id}",
            json={"assigned_driver_id": str(conductor_user.id)},
            headers=bearer(admin_token),
        )
        assert assigned.json()["data"]["assigned_driver_id"] == str(conductor_user.id)

        cleared = await test_client.patch(
            f"/api/routes/{route.id}",
            json={"assigned_driver_id": None},
            headers=bearer(admin_token),
        )
        assert cleared.status_code == 200
        assert cleared.json()["data"]["assigned_driver_id"] is None

    @pytest.mark.asyncio
    async def test_null_for_required_field_is_rejected(self, test_client, db_session, admin_token):
        route = await create_route(db_session)

        response = await test_client.patch(
            f"/api/routes/{route.id}", json={"origin": None}, headers=bearer(admin_token)
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_update_is_rejected(self, test_client, db_session, admin_token):
        route = await create_route(db_session)

        response = await test_client.patch(
            f"/api/routes/{route.id}", json={}, headers=bearer(admin_token)
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_soft_deleted_route_disappears(self, app, test_client, db_session, admin_token):
        route = await create_route(db_session)

        response = await test_client.delete(f"/api/routes/{route.id}", headers=bearer(admin_token))

        assert response.status_code == 200
        gone = await test_client.get(f"/api/routes/{route.id}", headers=bearer(admin_token))
        assert gone.status_code == 404
        search = await test_client.get("/api/routes/search", params=SEARCH)
        assert search.json()["data"]["pagination"]["total_items"] == 0
        # The row is kept, only flagged
        assert (await reload(app, Route, route.id)).active is False

        again = await test_client.delete(f"/api/routes/{route.id}", headers=bearer(admin_token))
        assert again.status_code == 404
