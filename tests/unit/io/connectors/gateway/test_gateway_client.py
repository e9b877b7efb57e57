"""
Unit tests for the verification gateway client.

HTTP is mocked at the requests.Session boundary; each test scripts the
proxy's status code and body text.
"""

import json
from unittest.mock import MagicMock, Mock

import pytest
import requests

from tests.fixtures.verification_gateway import TEST_PROXY_URL
from work_history_verification.io.connectors.gateway import (
    GatewayConfigurationError,
    GatewayResponseError,
    GatewayTransportError,
    VerificationGatewayClient,
)

ENCRYPTED_BLOB = "U2FsdGVkX1" + "a" * 80


def _response(status_code: int, body) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.text = body if isinstance(body, str) else json.dumps(body)
    return response


def _client(*responses) -> VerificationGatewayClient:
    session = requests.Session()
    session.post = MagicMock(side_effect=list(responses))
    return VerificationGatewayClient(session=session)


@pytest.mark.unit
class TestGatewayClientInitialization:
    def test_uses_settings_proxy_url_and_timeouts(self):
        client = _client()
        assert client.proxy_url == TEST_PROXY_URL
        assert client.timeout == 30.0
        assert client.connect_timeout == 10.0
        assert "WorkHistoryVerification" in client.session.headers["User-Agent"]

    def test_missing_proxy_url_raises_configuration_error(self, monkeypatch):
        from work_history_verification.config.settings import get_settings

        monkeypatch.setenv("WHV_GATEWAY_PROXY_URL", "")
        get_settings.cache_clear()

        with pytest.raises(GatewayConfigurationError) as exc_info:
            VerificationGatewayClient()
        assert "proxy URL required" in str(exc_info.value)


@pytest.mark.unit
class TestGatewayEncrypt:
    def test_posts_to_endpoint_query_parameter(self):
        client = _client(_response(200, {"requestData": ENCRYPTED_BLOB}))

        payload = {"transID": "tx-1", "docType": 106, "companyName": "Acme"}
        assert client.encrypt("company", payload) == ENCRYPTED_BLOB

        call = client.session.post.call_args
        assert call.args[0] == TEST_PROXY_URL
        assert call.kwargs["params"] == {"endpoint": "company-encrypt"}
        assert call.kwargs["json"] == payload
        assert call.kwargs["timeout"] == (10.0, 30.0)

    def test_accepts_bare_encrypted_string(self):
        client = _client(_response(200, ENCRYPTED_BLOB))
        assert client.encrypt("employee", {"transID": "tx-1"}) == ENCRYPTED_BLOB

    def test_accepts_short_bare_string(self):
        client = _client(_response(200, "c2hvcnQtYmxvYg=="))
        assert client.encrypt("company", {"transID": "tx-1"}) == "c2hvcnQtYmxvYg=="

    def test_blank_bare_string_raises_response_error(self):
        client = _client(_response(200, "   "))

        with pytest.raises(GatewayResponseError):
            client.encrypt("company", {"transID": "tx-1"})

    def test_missing_request_data_raises_response_error(self):
        client = _client(_response(200, {"unexpected": True}))

        with pytest.raises(GatewayResponseError) as exc_info:
            client.encrypt("company", {"transID": "tx-1"})
        assert exc_info.value.message == "Missing requestData from company encryption."

    def test_error_status_raises_transport_error(self):
        client = _client(_response(500, {"error": "Upstream unavailable"}))

        with pytest.raises(GatewayTransportError) as exc_info:
            client.encrypt("company", {"transID": "tx-1"})
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Upstream unavailable"


@pytest.mark.unit
class TestGatewayVerify:
    def test_success_returns_response_data(self):
        client = _client(_response(200, {"responseData": ENCRYPTED_BLOB}))

        data, response = client.verify_with_response("company", "request-blob")

        assert data == ENCRYPTED_BLOB
        assert response.soft_failure is False
        assert client.session.post.call_args.kwargs["json"] == {
            "requestData": "request-blob"
        }

    def test_error_status_with_payload_is_soft_failure(self):
        client = _client(_response(404, {"responseData": ENCRYPTED_BLOB}))

        data, response = client.verify_with_response("employee", "request-blob")

        assert data == ENCRYPTED_BLOB
        assert response.status_code == 404
        assert response.soft_failure is True

    def test_error_status_without_payload_raises(self):
        client = _client(_response(502, {"message": "Bad gateway"}))

        with pytest.raises(GatewayTransportError) as exc_info:
            client.verify("employee", "request-blob")
        assert exc_info.value.message == (
            "Employee verification request failed: Bad gateway"
        )

    def test_success_without_payload_raises_response_error(self):
        client = _client(_response(200, {}))

        with pytest.raises(GatewayResponseError):
            client.verify("company", "request-blob")

    def test_html_error_page_is_not_treated_as_payload(self):
        html = "<html><body>" + "x" * 100 + "</body></html>"
        client = _client(_response(503, html))

        with pytest.raises(GatewayTransportError):
            client.verify("company", "request-blob")


@pytest.mark.unit
class TestGatewayDecrypt:
    def test_returns_structured_result(self):
        result = {"status": 1, "CompanyName": {"EST1": "Acme"}}
        client = _client(_response(200, result))

        assert client.decrypt("company", "response-blob") == result
        assert client.session.post.call_args.kwargs["json"] == {
            "responseData": "response-blob"
        }

    def test_non_object_body_raises_response_error(self):
        client = _client(_response(200, "not json"))

        with pytest.raises(GatewayResponseError) as exc_info:
            client.decrypt("employee", "response-blob")
        assert "employee decryption" in exc_info.value.message


@pytest.mark.unit
class TestGatewayTransportFailures:
    def test_timeout_maps_to_transport_error(self):
        client = _client(requests.Timeout("read timed out"))

        with pytest.raises(GatewayTransportError) as exc_info:
            client.encrypt("company", {"transID": "tx-1"})
        assert "timed out" in exc_info.value.message
        assert exc_info.value.status_code is None

    def test_connection_error_maps_to_transport_error(self):
        client = _client(requests.ConnectionError("connection refused"))

        with pytest.raises(GatewayTransportError) as exc_info:
            client.decrypt("company", "blob")
        assert "company-decrypt" in exc_info.value.message
