"""
Envelope builders and pagination arithmetic.
"""

from utils.api_response import (
    build_pagination,
    created_response,
    error_response,
    paginated_response,
    success_response,
)


class TestEnvelopes:

    def test_success_without_data(self):
        assert success_response(message="Server is running") == {
            "success": True,
            "message": "Server is running",
        }

    def test_success_keeps_empty_data(self):
        assert success_response({}, "Deleted")["data"] == {}

    def test_created_default_message(self):
        assert created_response({"id": "1"})["message"] == "Resource created successfully"

    def test_error_omits_empty_errors(self):
        assert error_response("Nope") == {"success": False, "message": "Nope"}

    def test_error_with_details(self):
        body = error_response("Validation failed", errors=[{"field": "title", "message": "Title is required"}],
                              error="ValidationError")
        assert body["error"] == "ValidationError"
        assert body["errors"][0]["field"] == "title"


class TestPagination:

    def test_first_page(self):
        assert build_pagination(1, 10, 25) == {
            "currentPage": 1,
            "itemsPerPage": 10,
            "totalItems": 25,
            "totalPages": 3,
            "hasNextPage": True,
            "hasPreviousPage": False,
        }

    def test_last_page(self):
        meta = build_pagination(3, 10, 25)
        assert meta["hasNextPage"] is False
        assert meta["hasPreviousPage"] is True

    def test_exact_multiple(self):
        assert build_pagination(2, 10, 20)["totalPages"] == 2
        assert build_pagination(2, 10, 20)["hasNextPage"] is False

    def test_empty(self):
        meta = build_pagination(1, 10, 0)
        assert meta["totalPages"] == 0
        assert meta["hasNextPage"] is False
        assert meta["hasPreviousPage"] is False

    def test_paginated_response(self):
        body = paginated_response([1, 2], page=1, limit=2, total=5)
        assert body["success"] is True
        assert body["data"] == [1, 2]
        assert body["pagination"]["totalPages"] == 3
