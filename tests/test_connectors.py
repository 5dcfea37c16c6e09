"""Tests for the transport layer: policy, token sources, HTTPClient, DummyTransport."""

import logging

import httpx
import pytest

from crmbridge.connectors.base import (
    DEFAULT_POLICY,
    DynamicToken,
    RequestPolicy,
    StaticToken,
    TokenKind,
    token_source,
)
from crmbridge.connectors.dummy import DummyResponse, DummyTransport
from crmbridge.connectors.http_client import HTTPClient, HTTPResponse, debug_hooks
from crmbridge.errors import ConnectionError, CRMError, TimeoutError

BASE_URL = "https://crmsandbox.zoho.eu/crm/v2"


# =============================================================================
# RequestPolicy
# =============================================================================


class TestRequestPolicy:
    def test_defaults(self):
        assert DEFAULT_POLICY.get_timeout_tuple() == (10.0, 30.0)

    def test_with_timeout(self):
        policy = RequestPolicy.with_timeout(5.0)
        assert policy.read_timeout == 5.0
        assert policy.total_timeout == 60.0


# =============================================================================
# Token sources
# =============================================================================


class TestTokenSource:
    def test_string_is_static(self):
        source = token_source("abc")
        assert isinstance(source, StaticToken)
        assert source.kind == TokenKind.STATIC
        assert source.get_headers() == {"Authorization": "Zoho-oauthtoken abc"}

    def test_callable_is_dynamic(self):
        source = token_source(lambda: "abc")
        assert isinstance(source, DynamicToken)
        assert source.kind == TokenKind.DYNAMIC
        assert source.current() == "abc"

    def test_existing_source_kept(self):
        source = StaticToken(value="abc")
        assert token_source(source) is source

    def test_none_has_no_header(self):
        source = token_source(None)
        assert source.is_configured() is False
        assert source.get_headers() == {}

    def test_static_update_overwrites(self):
        source = StaticToken(value="old")
        source.update("new")
        assert source.current() == "new"

    def test_dynamic_update_ignored(self):
        source = DynamicToken(callback=lambda: "mine")
        source.update("new")
        assert source.current() == "mine"

    @pytest.mark.parametrize("value", [None, ""])
    def test_dynamic_without_value_has_no_header(self, value):
        calls = []

        def callback():
            calls.append(1)
            return value

        source = DynamicToken(callback=callback)
        assert source.get_headers() == {}
        assert len(calls) == 1


# =============================================================================
# HTTPResponse
# =============================================================================


class TestHTTPResponse:
    def test_parsed_json(self):
        response = HTTPResponse(status_code=200, headers={}, body=b'{"a": 1}')
        assert response.parsed() == {"a": 1}
        assert response.ok

    @pytest.mark.parametrize("body", [b"", b"   "])
    def test_parsed_empty(self, body):
        assert HTTPResponse(status_code=204, headers={}, body=body).parsed() is None

    def test_parsed_text(self):
        response = HTTPResponse(status_code=502, headers={}, body=b"<html>Bad gateway</html>")
        assert response.parsed() == "<html>Bad gateway</html>"
        assert not response.ok

    def test_json_raises_on_text(self):
        with pytest.raises(ValueError):
            HTTPResponse(status_code=200, headers={}, body=b"nope").json()


# =============================================================================
# HTTPClient
# =============================================================================


@pytest.fixture
def transport() -> DummyTransport:
    return DummyTransport(base_path="/crm/v2")


@pytest.fixture
def http_client(transport) -> HTTPClient:
    client = HTTPClient(base_url=BASE_URL, transport=transport)
    yield client
    client.close()


class TestHTTPClient:
    def test_builds_url_from_base(self, http_client, transport):
        transport.add_json("GET", "Leads/1", {"data": []})

        response = http_client.get("Leads/1")

        assert response.status_code == 200
        assert transport.get_call_log()[0].path == "/crm/v2/Leads/1"

    def test_absolute_url_passes_through(self, http_client, transport):
        transport.add_json("GET", "/crm/v2/Leads", {"data": []})
        http_client.get("https://crmsandbox.zoho.eu/crm/v2/Leads")
        assert transport.was_called("GET", "Leads")

    def test_default_and_extra_headers(self, http_client, transport):
        transport.add_json("GET", "Leads", {})
        http_client.headers["Accept"] = "application/json"

        http_client.get("Leads", headers={"Authorization": "Zoho-oauthtoken foo"})

        headers = transport.get_call_log()[0].headers
        assert headers["user-agent"] == "crmbridge/0.1"
        assert headers["accept"] == "application/json"
        assert headers["authorization"] == "Zoho-oauthtoken foo"

    def test_status_codes_not_raised(self, http_client, transport):
        transport.set_response("GET", "Leads", DummyResponse(status_code=500, body={"x": 1}))
        assert http_client.get("Leads").status_code == 500

    def test_client_reused(self, http_client):
        assert http_client.client is http_client.client

    def test_timeout_mapped(self):
        def slow(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = HTTPClient(base_url=BASE_URL, transport=httpx.MockTransport(slow))
        with pytest.raises(TimeoutError):
            client.get("Leads")

    def test_connect_error_mapped(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client = HTTPClient(base_url=BASE_URL, transport=httpx.MockTransport(refuse))
        with pytest.raises(ConnectionError):
            client.get("Leads")

    def test_other_errors_mapped(self):
        def broken(request):
            raise httpx.RemoteProtocolError("garbage", request=request)

        client = HTTPClient(base_url=BASE_URL, transport=httpx.MockTransport(broken))
        with pytest.raises(CRMError):
            client.get("Leads")

    def test_server_error_sent_once(self, http_client, transport):
        transport.set_response(
            "GET", "Leads", DummyResponse(status_code=503), DummyResponse(status_code=200, body={})
        )

        assert http_client.get("Leads").status_code == 503
        assert transport.call_count("GET", "Leads") == 1

    def test_transport_failure_not_retried(self):
        attempts = []

        def refuse(request):
            attempts.append(request)
            raise httpx.ConnectError("refused", request=request)

        client = HTTPClient(base_url=BASE_URL, transport=httpx.MockTransport(refuse))
        with pytest.raises(ConnectionError):
            client.get("Leads")
        assert len(attempts) == 1

    def test_debug_hooks_log_exchange(self, http_client, transport, caplog):
        transport.add_json("GET", "Leads", {})
        for event, hook in debug_hooks(logging.getLogger("crmbridge.test")).items():
            http_client.add_hook(event, hook)

        with caplog.at_level(logging.DEBUG, logger="crmbridge.test"):
            http_client.get("Leads")

        assert "--> GET" in caplog.text


# =============================================================================
# DummyTransport
# =============================================================================


class TestDummyTransport:
    def test_unconfigured_route_is_404(self, http_client):
        response = http_client.get("Nowhere")
        assert response.status_code == 404
        assert response.parsed() is None

    def test_sequence_then_repeat_last(self, http_client, transport):
        transport.set_response(
            "GET", "Leads", DummyResponse(body={"n": 1}), DummyResponse(body={"n": 2})
        )
        assert [http_client.get("Leads").parsed()["n"] for _ in range(3)] == [1, 2, 2]

    def test_records_calls(self, http_client, transport):
        transport.add_json("POST", "Leads", {})
        http_client.post("Leads", json={"data": []}, params={"trigger": "workflow"})

        call = transport.calls("POST", "Leads")[0]
        assert call.body == {"data": []}
        assert call.params == {"trigger": "workflow"}
        assert transport.call_count() == 1

        transport.clear_call_log()
        assert transport.call_count() == 0

    def test_clear_responses(self, http_client, transport):
        transport.add_json("GET", "Leads", {})
        transport.clear_responses()
        assert http_client.get("Leads").status_code == 404
