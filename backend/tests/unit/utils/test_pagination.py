"""
Unit Tests for pagination helpers
"""
from cmis_portal.utils.pagination import (
    parse_pagination,
    build_pagination,
    total_pages,
)


class TestParsePagination:
    """Raw query values to PaginationParams"""

    def test_defaults(self):
        params = parse_pagination(None, None, default_limit=50)

        assert params.page == 1
        assert params.limit == 50
        assert params.offset == 0

    def test_numeric_strings(self):
        params = parse_pagination("3", "20")

        assert (params.page, params.limit) == (3, 20)
        assert params.offset == 40

    def test_limit_capped(self):
        assert parse_pagination(1, 1000, max_limit=100).limit == 100

    def test_non_positive_values_clamped(self):
        params = parse_pagination("0", "-5")

        assert params.page == 1
        assert params.limit == 1

    def test_garbage_falls_back_to_defaults(self):
        params = parse_pagination("abc", "xyz", default_limit=10)

        assert (params.page, params.limit) == (1, 10)


class TestBuildPagination:
    """Pagination block in listing responses"""

    def test_total_pages_rounds_up(self):
        assert total_pages(5, 2) == 3
        assert total_pages(4, 2) == 2

    def test_total_pages_zero_rows(self):
        assert total_pages(0, 10) == 0

    def test_block_shape(self):
        assert build_pagination(2, 10, 25) == {
            "page": 2,
            "limit": 10,
            "total": 25,
            "totalPages": 3,
        }
