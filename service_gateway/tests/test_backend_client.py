"""
Unit tests for the Gateway backend client.
"""

import httpx
import pytest

from service_gateway.app.adapters.backend_client import (
    BackendClient,
    OutboundRequest,
    extract_error_fields,
)
from shared.config import BackendPoolConfig
from shared.errors import (
    BackendApplicationError,
    BackendTimeout,
    MalformedBackendResponse,
    NetworkFailure,
    UnknownFailure,
)
from shared.metrics import MetricsCollector
from shared.test_helpers import BackendStub, json_response, request_json, text_response

BASE_URL = "http://backend.test"


@pytest.fixture
def stub():
    return BackendStub()


@pytest.fixture
def metrics():
    return MetricsCollector("gateway")


@pytest.fixture
def pool():
    return BackendPoolConfig(name="backend", base_url=f"{BASE_URL}/", token="svc-token")


@pytest.fixture
def client(pool, stub, metrics):
    return BackendClient(pool, metrics=metrics, transport=stub.transport)


class TestForwardSuccess:
    """Successful outbound calls."""

    @pytest.mark.asyncio
    async def test_returns_parsed_payload(self, client, stub):
        stub.on("GET", f"{BASE_URL}/api/v1/agents", json_response(200, {"agents": [{"id": "a1"}]}))

        payload = await client.forward("/api/v1/agents")

        assert payload == {"agents": [{"id": "a1"}]}
        assert len(stub.calls) == 1
        request = stub.calls[0]
        assert str(request.url) == f"{BASE_URL}/api/v1/agents"
        assert request.method == "GET"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["Authorization"] == "Bearer svc-token"

    @pytest.mark.asyncio
    async def test_query_string_is_sent_verbatim(self, client, stub):
        stub.on("GET", f"{BASE_URL}/api/v1/content/briefs", json_response(200, {"items": []}))

        await client.forward("/api/v1/content/briefs?status=draft&limit=20")

        assert stub.calls[0].url.query == b"status=draft&limit=20"

    @pytest.mark.asyncio
    async def test_post_body_is_forwarded_unchanged(self, client, stub):
        body = {"ids": [1, 2], "filters": {"beat": "tech", "minScore": 0.5}}
        stub.on("POST", f"{BASE_URL}/api/v1/journalist-graph/graph", json_response(200, {"nodes": []}))

        await client.forward(
            "/api/v1/journalist-graph/graph",
            OutboundRequest(method="POST", body=body),
        )

        request = stub.calls[0]
        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        assert request_json(request) == body
        assert list(request_json(request).keys()) == ["ids", "filters"]

    @pytest.mark.asyncio
    async def test_post_without_body_sends_no_content(self, client, stub):
        stub.on("POST", f"{BASE_URL}/api/v1/journalist-graph/find-duplicates", json_response(200, {"duplicates": []}))

        await client.forward("/api/v1/journalist-graph/find-duplicates", OutboundRequest(method="POST"))

        assert stub.calls[0].content == b""

    @pytest.mark.asyncio
    async def test_no_content_returns_none(self, client, stub):
        stub.on("POST", f"{BASE_URL}/api/v1/pr/pitches/contacts/c1/queue", httpx.Response(204))

        payload = await client.forward("/api/v1/pr/pitches/contacts/c1/queue", OutboundRequest(method="POST"))

        assert payload is None

    @pytest.mark.asyncio
    async def test_success_is_counted(self, client, stub, metrics):
        stub.on("GET", f"{BASE_URL}/api/v1/agents", json_response(200, {"agents": []}))

        await client.forward("/api/v1/agents")

        assert metrics.get_sample("backend_requests_total", {"pool": "backend", "outcome": "success"}) == 1.0


class TestSigning:
    """Service credentials per pool."""

    @pytest.mark.asyncio
    async def test_caller_authorization_wins_over_service_token(self, client, stub):
        stub.on("GET", f"{BASE_URL}/api/v1/agents", json_response(200, {}))

        await client.forward(
            "/api/v1/agents",
            OutboundRequest(headers={"authorization": "Bearer user-token"}),
        )

        assert stub.calls[0].headers["Authorization"] == "Bearer user-token"

    @pytest.mark.asyncio
    async def test_custom_header_without_scheme(self, stub):
        pool = BackendPoolConfig(
            name="pr",
            base_url=BASE_URL,
            token="pr-key",
            auth_header="X-API-Key",
            auth_scheme=None,
        )
        client = BackendClient(pool, transport=stub.transport)
        stub.on("GET", f"{BASE_URL}/api/v1/pr/releases", json_response(200, {"releases": []}))

        await client.forward("/api/v1/pr/releases")

        request = stub.calls[0]
        assert request.headers["X-API-Key"] == "pr-key"
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_no_token_sends_no_credential(self, stub):
        client = BackendClient(BackendPoolConfig(name="backend", base_url=BASE_URL), transport=stub.transport)
        stub.on("GET", f"{BASE_URL}/api/v1/agents", json_response(200, {}))

        await client.forward("/api/v1/agents")

        assert "Authorization" not in stub.calls[0].headers


class TestForwardFailures:
    """Every failure kind surfaces as a GatewayError subclass."""

    @pytest.mark.asyncio
    async def test_nested_error_body(self, client, stub):
        stub.on(
            "GET",
            f"{BASE_URL}/api/v1/personalities/p1",
            json_response(404, {"success": False, "error": {"code": "NOT_FOUND", "message": "Personality not found"}}),
        )

        with pytest.raises(BackendApplicationError) as exc_info:
            await client.forward("/api/v1/personalities/p1")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Personality not found"
        assert exc_info.value.code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_flat_error_body(self, client, stub):
        stub.on(
            "POST",
            f"{BASE_URL}/api/v1/journalist-graph/graph",
            json_response(400, {"error": "invalid ids", "code": "BAD_IDS"}),
        )

        with pytest.raises(BackendApplicationError) as exc_info:
            await client.forward("/api/v1/journalist-graph/graph", OutboundRequest(method="POST", body={"ids": [1, 2]}))

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "invalid ids"
        assert exc_info.value.code == "BAD_IDS"

    @pytest.mark.asyncio
    async def test_json_error_without_message_uses_status_text(self, client, stub):
        stub.on("GET", f"{BASE_URL}/api/v1/agents", json_response(503, {"retry": True}))

        with pytest.raises(BackendApplicationError) as exc_info:
            await client.forward("/api/v1/agents")

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "Service Unavailable"
        assert exc_info.value.code is None

    @pytest.mark.asyncio
    async def test_non_json_error_body_uses_status_text(self, client, stub):
        stub.on("GET", f"{BASE_URL}/api/v1/agents", text_response(500, "<html>oops</html>"))

        with pytest.raises(MalformedBackendResponse) as exc_info:
            await client.forward("/api/v1/agents")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_invalid_json_on_success(self, client, stub, metrics):
        stub.on("GET", f"{BASE_URL}/api/v1/agents", text_response(200, "{not json"))

        with pytest.raises(MalformedBackendResponse) as exc_info:
            await client.forward("/api/v1/agents")

        assert exc_info.value.status_code == 502
        assert metrics.get_sample("backend_requests_total", {"pool": "backend", "outcome": "error"}) == 1.0

    @pytest.mark.asyncio
    async def test_connection_refused(self, client, stub, metrics):
        stub.on("GET", f"{BASE_URL}/api/v1/personalities", httpx.ConnectError("Connection refused"))

        with pytest.raises(NetworkFailure) as exc_info:
            await client.forward("/api/v1/personalities")

        assert not isinstance(exc_info.value, BackendTimeout)
        assert exc_info.value.status_code == 502
        assert exc_info.value.code is None
        assert metrics.get_sample("backend_requests_total", {"pool": "backend", "outcome": "unreachable"}) == 1.0

    @pytest.mark.asyncio
    async def test_timeout(self, client, stub):
        stub.on("GET", f"{BASE_URL}/api/v1/personalities", httpx.ReadTimeout("timed out"))

        with pytest.raises(BackendTimeout) as exc_info:
            await client.forward("/api/v1/personalities")

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_unexpected_error(self, client, stub):
        stub.on("GET", f"{BASE_URL}/api/v1/agents", RuntimeError("transport exploded"))

        with pytest.raises(UnknownFailure) as exc_info:
            await client.forward("/api/v1/agents")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "transport exploded"

    @pytest.mark.asyncio
    async def test_failures_are_not_retried(self, client, stub):
        stub.on("GET", f"{BASE_URL}/api/v1/agents", httpx.ConnectError("Connection refused"))

        with pytest.raises(NetworkFailure):
            await client.forward("/api/v1/agents")

        assert len(stub.calls) == 1


class TestClientLifecycle:

    @pytest.mark.asyncio
    async def test_close_releases_client(self, client, stub):
        stub.on("GET", f"{BASE_URL}/api/v1/agents", json_response(200, {}))
        await client.forward("/api/v1/agents")

        await client.close()
        await client.forward("/api/v1/agents")

        assert len(stub.calls) == 2
        await client.close()


class TestExtractErrorFields:

    @pytest.mark.parametrize(
        "body, expected",
        [
            ({"error": {"message": "m", "code": "C"}}, ("m", "C")),
            ({"error": "m", "code": "C"}, ("m", "C")),
            ({"message": "m"}, ("m", None)),
            ({"error": {"code": "C"}, "message": "m"}, ("m", "C")),
            ({"error": ""}, (None, None)),
            ([1, 2], (None, None)),
            ("text", (None, None)),
        ],
    )
    def test_shapes(self, body, expected):
        assert extract_error_fields(body) == expected
