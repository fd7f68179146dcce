"""Tests for the listing HTTP client."""

import asyncio

import httpx
import pytest

from roster.exceptions import ListingRequestError
from roster.query import ListingClient, ListingPage


def _client(handler) -> ListingClient:
    return ListingClient(
        base_url="http://roster.test",
        path="/employees",
        transport=httpx.MockTransport(handler),
    )


class TestFetch:
    """Tests for ListingClient.fetch."""

    def test_decodes_page(self, server):
        """Test a successful page with the pagination metadata."""
        client = ListingClient(base_url="http://roster.test", path="/employees", transport=server.transport)
        page = asyncio.run(client.fetch({"page": 2, "per_page": 25}))

        assert isinstance(page, ListingPage)
        assert page.data == [{"id": 1, "surname": "Employee 1"}]
        assert page.meta.current_page == 2
        assert page.meta.from_ == 1
        assert page.meta.per_page == 25
        assert page.departments is None
        assert server.requests[0].url.path == "/employees"

    def test_list_params_sent_with_brackets(self, server):
        """Test that id lists go out as repeated bracketed keys."""
        client = ListingClient(base_url="http://roster.test", path="/employees", transport=server.transport)
        asyncio.run(client.fetch({"page": 1, "department_ids": ["4", "5"]}))
        assert server.params().get_list("department_ids[]") == ["4", "5"]

    def test_side_data(self, server):
        """Test that facet lists and flash messages are decoded when present."""
        server.extra = {
            "departments": [{"id": 1, "faculty_name": "Science"}],
            "flash": {"success": "Employee restored"},
        }
        client = ListingClient(base_url="http://roster.test", path="/employees", transport=server.transport)
        page = asyncio.run(client.fetch({"page": 1}))
        assert page.departments == [{"id": 1, "faculty_name": "Science"}]
        assert page.flash.success == "Employee restored"
        assert page.flash.error is None


class TestErrors:
    """Tests for error mapping."""

    def test_http_error_status(self, server):
        """Test that a non-2xx response carries its status code."""
        server.status_code = 500
        client = ListingClient(base_url="http://roster.test", path="/employees", transport=server.transport)
        with pytest.raises(ListingRequestError) as exc_info:
            asyncio.run(client.fetch({"page": 1}))
        assert exc_info.value.status_code == 500

    def test_invalid_json(self):
        """Test that an undecodable body is reported."""

        def handler(request):
            return httpx.Response(200, content=b"<html>oops</html>")

        with pytest.raises(ListingRequestError, match="not valid JSON"):
            asyncio.run(_client(handler).fetch({"page": 1}))

    def test_unexpected_shape(self):
        """Test that a body of the wrong shape is reported."""

        def handler(request):
            return httpx.Response(200, json={"data": "not a list"})

        with pytest.raises(ListingRequestError, match="Unexpected listing response"):
            asyncio.run(_client(handler).fetch({"page": 1}))

    def test_transport_failure(self):
        """Test that connection errors are wrapped."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ListingRequestError) as exc_info:
            asyncio.run(_client(handler).fetch({"page": 1}))
        assert exc_info.value.status_code is None

    def test_timeout(self):
        """Test that timeouts are wrapped with their own message."""

        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(ListingRequestError, match="timed out"):
            asyncio.run(_client(handler).fetch({"page": 1}))
