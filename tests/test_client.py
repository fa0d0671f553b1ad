"""
Tests for the Graph API client: URLs, tokens, errors and pagination.
"""
import httpx
import pytest

from adsdesk.connectors.meta.client import MetaClient
from adsdesk.connectors.meta.errors import GraphAPIError, TokenExpiredError

from conftest import GRAPH


@pytest.mark.asyncio
class TestRequest:

    async def test_attaches_token_and_versioned_url(self, graph, endpoints):
        graph.add("act_1", {"id": "act_1"})
        result = await endpoints.client.request("act_1", {"fields": "id"}, "tok")
        assert result == {"id": "act_1"}
        sent = graph.requests[0]
        assert str(sent.url).startswith(f"{GRAPH}/act_1")
        assert sent.url.params["access_token"] == "tok"
        assert sent.url.params["fields"] == "id"

    async def test_error_status_is_classified(self, graph, endpoints):
        graph.add(
            "act_1",
            {"error": {"message": "Error validating access token", "code": 190}},
            status_code=400,
        )
        with pytest.raises(TokenExpiredError) as exc:
            await endpoints.client.request("act_1", access_token="tok")
        assert exc.value.status_code == 400

    async def test_error_in_ok_body(self, graph, endpoints):
        graph.add("act_1", {"error": {"message": "Unsupported get request", "code": 100}})
        with pytest.raises(GraphAPIError) as exc:
            await endpoints.client.request("act_1", access_token="tok")
        assert not isinstance(exc.value, TokenExpiredError)
        assert exc.value.error_code == 100

    async def test_non_json_error(self, graph, endpoints):
        graph.add("act_1", lambda request: httpx.Response(500, text="Internal"))
        with pytest.raises(GraphAPIError) as exc:
            await endpoints.client.request("act_1", access_token="tok")
        assert exc.value.message == "HTTP 500 from Graph API"

    async def test_transport_failure(self, test_settings):
        def fail(request):
            raise httpx.ConnectError("refused", request=request)

        client = MetaClient(
            httpx.AsyncClient(transport=httpx.MockTransport(fail)), test_settings
        )
        with pytest.raises(GraphAPIError) as exc:
            await client.request("act_1", access_token="tok")
        assert "Connection failed" in exc.value.message


@pytest.mark.asyncio
class TestPagination:

    async def test_follows_next_links(self, graph, endpoints):
        def page(request):
            if request.url.params.get("after") == "c2":
                return httpx.Response(200, json={"data": [{"id": "3"}]})
            return httpx.Response(
                200,
                json={
                    "data": [{"id": "1"}, {"id": "2"}],
                    "paging": {"next": f"{GRAPH}/act_1/ads?access_token=tok&after=c2"},
                },
            )

        graph.add("act_1/ads", page)
        rows = await endpoints.client.paginated_get("act_1/ads", {"fields": "id"}, "tok")
        assert [r["id"] for r in rows] == ["1", "2", "3"]
        assert len(graph.requests) == 2
        follow_up = graph.requests[1].url.params
        assert follow_up["access_token"] == "tok"
        assert follow_up["after"] == "c2"

    async def test_stops_at_max_pages(self, graph, endpoints):
        graph.add(
            "act_1/ads",
            {"data": [{"id": "x"}], "paging": {"next": f"{GRAPH}/act_1/ads?after=again"}},
        )
        rows = await endpoints.client.paginated_get("act_1/ads", None, "tok", max_pages=3)
        assert len(rows) == 3
