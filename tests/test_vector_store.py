"""
Unit tests for the vector store client and the search request builder.

Uses httpx.MockTransport so no search service is needed.
"""

import asyncio
import json

import httpx
import pytest

from ragdesk.core.config import RagOptions
from ragdesk.services.retrieval_service import build_search_request
from ragdesk.services.vector_store import VectorStoreClient


def _client(handler, api_key: str = "secret") -> VectorStoreClient:
    return VectorStoreClient(
        base_url="https://search.example.net/",
        api_key=api_key,
        index_name="docs",
        transport=httpx.MockTransport(handler),
    )


def _request():
    return build_search_request([0.5, 0.25], "tesla_motors", RagOptions())


class TestBuildSearchRequest:
    def test_wire_shape(self) -> None:
        body = _request().model_dump(by_alias=True)
        assert body == {
            "count": True,
            "select": "content,type",
            "top": 10,
            "filter": "projectName eq 'tesla_motors'",
            "vectorQueries": [
                {"kind": "vector", "vector": [0.5, 0.25], "k": 3, "fields": "embeddings"}
            ],
        }

    def test_options_drive_query_shape(self) -> None:
        options = RagOptions(vector_k=5, search_top=20, vector_field="vec", search_select="content")
        request = build_search_request([1.0], "acme", options)
        assert request.top == 20
        assert request.select == "content"
        assert request.vector_queries[0].k == 5
        assert request.vector_queries[0].fields == "vec"


class TestVectorStoreClient:
    @pytest.mark.asyncio
    async def test_posts_to_index_search_endpoint(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"value": []})

        result = await _client(handler).search(_request())

        assert result.is_success and result.value == []
        (request,) = seen
        assert request.method == "POST"
        assert request.url.path == "/indexes/docs/docs/search"
        assert request.url.params["api-version"] == "2023-11-01"
        assert request.headers["api-key"] == "secret"
        body = json.loads(request.content)
        assert "vectorQueries" in body and "vector_queries" not in body
        assert body["filter"] == "projectName eq 'tesla_motors'"

    @pytest.mark.asyncio
    async def test_no_api_key_header_when_key_is_empty(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"value": []})

        await _client(handler, api_key="").search(_request())

        assert "api-key" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_parses_hits_with_search_score(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "@odata.count": 2,
                    "value": [
                        {"@search.score": 0.83, "content": "Model 3 range.", "type": "N1"},
                        {"@search.score": 0.61, "content": "Dealer margins.", "type": "N2"},
                    ],
                },
            )

        result = await _client(handler).search(_request())

        assert result.is_success
        chunks = result.value
        assert [c.content for c in chunks] == ["Model 3 range.", "Dealer margins."]
        assert [c.type for c in chunks] == ["N1", "N2"]
        assert chunks[0].score == pytest.approx(0.83)
        assert chunks[0].model_dump() == {"content": "Model 3 range.", "type": "N1", "score": 0.83}

    @pytest.mark.asyncio
    async def test_missing_value_is_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"@odata.count": 0})

        result = await _client(handler).search(_request())

        assert result.is_success and result.value == []

    @pytest.mark.asyncio
    async def test_null_fields_in_hit_are_read_as_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "value": [
                        {"@search.score": 0.9, "content": "Tesla makes cars.", "type": None},
                        {"@search.score": 0.5, "content": None, "type": "N2"},
                    ]
                },
            )

        result = await _client(handler).search(_request())

        assert result.is_success
        first, second = result.value
        assert first.content == "Tesla makes cars." and first.type == ""
        assert second.content == "" and second.type == "N2"

    @pytest.mark.asyncio
    async def test_error_status_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, text="Forbidden")

        result = await _client(handler).search(_request())

        assert not result.is_success
        assert result.error_message == "Vector DB search failed with status 403"

    @pytest.mark.asyncio
    async def test_transport_error_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _client(handler).search(_request())

        assert not result.is_success
        assert result.error_message.startswith("An error occurred during Vector DB search:")

    @pytest.mark.asyncio
    async def test_invalid_json_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        result = await _client(handler).search(_request())

        assert not result.is_success
        assert "invalid JSON" in result.error_message

    @pytest.mark.asyncio
    async def test_cancelled_before_request(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"value": []})

        cancel = asyncio.Event()
        cancel.set()
        result = await _client(handler).search(_request(), cancel)

        assert not result.is_success
        assert result.error_message == "Operation cancelled"
        assert calls == []
