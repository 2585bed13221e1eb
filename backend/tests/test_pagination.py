"""
Rutas Seguras Backend — Pagination Tests
========================================

What:  Page clamping and the pagination block shared by every list endpoint.
"""

import pytest

from rutas_seguras.services.pagination import PageRequest, build_pagination, clamp_page


class TestClampPage:

    @pytest.mark.parametrize("page", [None, 0, -1, -1000])
    def test_low_pages_become_first(self, page):
        assert clamp_page(page, max_page=1000) == 1

    def test_in_range_page_is_kept(self):
        assert clamp_page(3, max_page=1000) == 3

    def test_high_page_is_capped(self):
        assert clamp_page(10**9, max_page=1000) == 1000
        assert clamp_page(50, max_page=10) == 10

    def test_page_request_clamps_with_its_own_ceiling(self):
        assert PageRequest(page=80, page_size=5, max_page=40).current == 40
        assert PageRequest(page=None, page_size=5, max_page=40).current == 1


class TestBuildPagination:

    @pytest.mark.parametrize(
        "total, size, pages",
        [(0, 20, 0), (1, 20, 1), (20, 20, 1), (21, 20, 2), (5, 2, 3)],
    )
    def test_total_pages_is_ceiling(self, total, size, pages):
        assert build_pagination(1, total, size).total_pages == pages

    def test_block_echoes_inputs(self):
        block = build_pagination(4, 45, 10)
        assert block.current_page == 4
        assert block.total_items == 45
        assert block.items_per_page == 10
