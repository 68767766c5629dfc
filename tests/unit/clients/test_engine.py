"""EngineClientのユニットテスト。"""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from vigil.clients.engine import EngineClient
from vigil.models.check import HistoricParameters, Percentage, Severity, ValidationWindow
from vigil.models.errors import ExternalServiceError
from vigil.models.git import GitContext

ENDPOINT = "https://engine.example.com/api/graphql"


def _check_payload(**overrides: Any) -> dict[str, Any]:
    check = {
        "targetUrl": "https://engine.example.com/check/1",
        "diffToPrevious": {
            "type": "FAILURE",
            "affectedQueries": [{"__typename": "AffectedQuery"}] * 3,
            "changes": [
                {"type": "FAILURE", "code": "FIELD_REMOVED", "description": "`User.name` was removed"},
                {"type": "NOTICE", "code": "FIELD_ADDED", "description": "`User.email` was added"},
            ],
            "validationConfig": {
                "from": -604800,
                "to": 0,
                "queryCountThreshold": 1,
                "queryCountThresholdPercentage": 0,
            },
        },
    }
    check.update(overrides)
    return {"data": {"service": {"checkSchema": check}}}


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> EngineClient:
    return EngineClient(ENDPOINT, "service:accounts:secret", transport=httpx.MockTransport(handler))


class TestEngineClient:
    async def test_check_schema_parses_result(self) -> None:
        client = _client(lambda request: httpx.Response(200, json=_check_payload()))
        result = await client.check_schema(service_id="accounts", schema={"types": []}, tag="current")

        assert result.target_url == "https://engine.example.com/check/1"
        assert result.affected_query_count == 3
        assert [c.type for c in result.changes] == [Severity.FAILURE, Severity.NOTICE]
        assert result.window == ValidationWindow(from_=-604800, to=0)

    async def test_request_body_and_headers(self) -> None:
        captured: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=_check_payload())

        client = _client(handler)
        await client.check_schema(
            service_id="accounts",
            schema={"types": []},
            tag="production",
            git_context=GitContext(commit="abc123", branch="main"),
            frontend="https://studio.example.com",
            historic_parameters=HistoricParameters(
                window=ValidationWindow(from_=-3600, to=0), threshold=Percentage(value=0.01)
            ),
        )

        assert captured["headers"]["x-api-key"] == "service:accounts:secret"
        body = captured["body"]
        assert body["operationName"] == "CheckSchema"
        assert "checkSchema" in body["query"]
        variables = body["variables"]
        assert variables["id"] == "accounts"
        assert variables["tag"] == "production"
        assert variables["gitContext"] == {"commit": "abc123", "branch": "main"}
        assert variables["frontend"] == "https://studio.example.com"
        assert variables["historicParameters"] == {"from": -3600, "to": 0, "queryCountThresholdPercentage": 0.01}

    async def test_historic_parameters_omitted_when_absent(self) -> None:
        captured: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["variables"] = json.loads(request.content)["variables"]
            return httpx.Response(200, json=_check_payload())

        await _client(handler).check_schema(service_id="accounts", schema={}, tag=None, git_context=GitContext())
        assert "historicParameters" not in captured["variables"]
        assert captured["variables"]["gitContext"] is None

    async def test_http_error(self) -> None:
        client = _client(lambda request: httpx.Response(401, text="invalid api key"))
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.check_schema(service_id="accounts", schema={}, tag=None)
        assert exc_info.value.status_code == 401
        assert "invalid api key" in str(exc_info.value)

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalServiceError) as exc_info:
            await _client(handler).check_schema(service_id="accounts", schema={}, tag=None)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    async def test_graphql_errors(self) -> None:
        payload = {"errors": [{"message": "schema is invalid"}, {"message": "second"}], "data": None}
        client = _client(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(ExternalServiceError, match="schema is invalid; second"):
            await client.check_schema(service_id="accounts", schema={}, tag=None)

    async def test_service_not_found(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"data": {"service": None}}))
        with pytest.raises(ExternalServiceError, match="Service not found: accounts"):
            await client.check_schema(service_id="accounts", schema={}, tag=None)

    async def test_invalid_json(self) -> None:
        client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(ExternalServiceError, match="invalid JSON"):
            await client.check_schema(service_id="accounts", schema={}, tag=None)

    async def test_malformed_result(self) -> None:
        payload = _check_payload(diffToPrevious={"changes": []})
        client = _client(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(ExternalServiceError, match="Malformed check result"):
            await client.check_schema(service_id="accounts", schema={}, tag=None)

    async def test_unknown_severity_is_malformed(self) -> None:
        payload = _check_payload()
        payload["data"]["service"]["checkSchema"]["diffToPrevious"]["changes"] = [
            {"type": "CRITICAL", "code": "X", "description": "x"}
        ]
        client = _client(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(ExternalServiceError, match="Malformed check result"):
            await client.check_schema(service_id="accounts", schema={}, tag=None)

    @pytest.mark.parametrize(
        "payload",
        [
            {"data": {"service": "oops"}},
            {"data": {"service": ["accounts"]}},
            {"data": "oops"},
            {"data": [1, 2]},
        ],
    )
    async def test_unexpected_payload_shape(self, payload: dict[str, Any]) -> None:
        client = _client(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(ExternalServiceError, match="unexpected payload"):
            await client.check_schema(service_id="accounts", schema={}, tag=None)
