"""Unit tests for ReportClient with a mocked requests session.

No real HTTP requests are made; ``session.request`` returns canned
responses and retries run without waiting.
"""

from unittest.mock import MagicMock

import pytest
import requests

from clubledger.config import ClientConfig
from clubledger.exceptions import (
    AuthorizationError,
    FetchError,
    InvalidShareCode,
    RateLimited,
    ResourceNotFound,
    TransientFetchError,
)
from clubledger.http_client import ReportClient


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_config(**overrides) -> ClientConfig:
    """Create a config with fast retries for testing."""
    defaults = {
        "base_url": "http://api.test/",
        "api_token": "secret-token",
        "max_retries": 2,
        "retry_initial_wait": 0.0,
    }
    defaults.update(overrides)
    return ClientConfig(**defaults)


def _make_response(status: int = 200, payload=None, content: bytes = b"[]"):
    response = MagicMock()
    response.status_code = status
    response.content = content
    response.url = "http://api.test/endpoint"
    response.json.return_value = payload
    return response


def _make_session(*responses):
    session = MagicMock()
    session.headers = {}
    session.request.side_effect = list(responses)
    return session


def _make_client(*responses, **config_overrides):
    session = _make_session(*responses)
    return ReportClient(_make_config(**config_overrides), session=session), session


# ===================================================================
# Successful requests
# ===================================================================


class TestSuccessfulRequests:
    def test_unpaid_report_returns_rows(self):
        rows = [{"playerId": 1}]
        client, session = _make_client(_make_response(payload=rows))
        assert client.get_unpaid_report() == rows

        args, kwargs = session.request.call_args
        assert args == ("GET", "http://api.test/api/v2/reports/unpaid")
        assert kwargs["headers"] == {"Authorization": "Bearer secret-token"}
        assert kwargs["timeout"] == 20.0

    def test_anonymous_requests_send_no_auth_header(self):
        client, session = _make_client(_make_response(payload=[]), api_token=None)
        client.get_public_unpaid_report("abc123")
        kwargs = session.request.call_args.kwargs
        assert kwargs["headers"] == {}
        assert kwargs["params"] == {"shareCode": "abc123"}

    def test_legacy_anonymous_endpoint(self):
        client, session = _make_client(_make_response(payload=[]))
        client.get_anonymous_outstanding_payments("abc123")
        args, kwargs = session.request.call_args
        assert args[1] == "http://api.test/api/v1/anonymous/reports/outstanding-payments"
        assert kwargs["params"] == {"shareCode": "abc123"}

    def test_accept_header_set_on_session(self):
        client, session = _make_client()
        assert session.headers["Accept"] == "application/json"

    def test_empty_body_returns_none(self):
        client, _ = _make_client(_make_response(content=b""))
        assert client.mark_player_paid(5) is None

    def test_mark_registration_unpaid_path(self):
        client, session = _make_client(_make_response(payload={}))
        client.mark_registration_paid(9, paid=False)
        args, kwargs = session.request.call_args
        assert args == ("PUT", "http://api.test/api/v1/registrations/9/unpaid")
        assert kwargs["json"] == {}

    def test_create_share_url_posts_url(self):
        payload = {"fullUrl": "http://club.test/r?share-code=x"}
        client, session = _make_client(_make_response(payload=payload))
        assert client.create_share_url("http://club.test/r") == payload
        assert session.request.call_args.kwargs["json"] == {"url": "http://club.test/r"}

    def test_stats_counted(self):
        client, _ = _make_client(_make_response(payload=[]))
        client.get_outstanding_payments()
        assert client.stats == {
            "requests": 1,
            "successes": 1,
            "failures": 0,
            "success_rate": 1.0,
        }


# ===================================================================
# Error mapping
# ===================================================================


class TestErrorMapping:
    def test_invalid_share_code(self):
        client, session = _make_client(_make_response(status=403))
        with pytest.raises(InvalidShareCode) as exc_info:
            client.get_public_unpaid_report("expired")
        assert exc_info.value.status_code == 403
        assert session.request.call_count == 1

    def test_forbidden_without_share_code(self):
        client, _ = _make_client(_make_response(status=403))
        with pytest.raises(AuthorizationError) as exc_info:
            client.get_outstanding_payments()
        assert not isinstance(exc_info.value, InvalidShareCode)

    def test_unauthorized(self):
        client, _ = _make_client(_make_response(status=401))
        with pytest.raises(AuthorizationError):
            client.get_unpaid_report()

    def test_not_found(self):
        client, _ = _make_client(_make_response(status=404))
        with pytest.raises(ResourceNotFound):
            client.get_registrations_by_match(999)

    def test_other_client_error(self):
        client, session = _make_client(_make_response(status=400))
        with pytest.raises(FetchError):
            client.get_unpaid_report()
        assert session.request.call_count == 1

    def test_non_json_body(self):
        response = _make_response(content=b"<html>")
        response.json.side_effect = ValueError("not json")
        client, _ = _make_client(response)
        with pytest.raises(FetchError, match="non-JSON"):
            client.get_unpaid_report()


# ===================================================================
# Retries
# ===================================================================


class TestRetries:
    def test_rate_limit_then_success(self):
        client, session = _make_client(
            _make_response(status=429),
            _make_response(payload=[{"playerId": 1}]),
        )
        assert client.get_unpaid_report() == [{"playerId": 1}]
        assert session.request.call_count == 2
        assert client.stats["failures"] == 1

    def test_server_errors_exhaust_retries(self):
        client, session = _make_client(
            _make_response(status=502),
            _make_response(status=503),
        )
        with pytest.raises(TransientFetchError):
            client.get_unpaid_report()
        assert session.request.call_count == 2

    def test_persistent_rate_limit_reraised(self):
        client, _ = _make_client(
            _make_response(status=429),
            _make_response(status=429),
        )
        with pytest.raises(RateLimited):
            client.get_unpaid_report()

    def test_connection_error_is_transient(self):
        client, session = _make_client(
            requests.ConnectionError("refused"),
            requests.Timeout("slow"),
        )
        with pytest.raises(TransientFetchError):
            client.get_unpaid_report()
        assert session.request.call_count == 2

    def test_other_request_errors_fail_without_retry(self):
        client, session = _make_client(requests.TooManyRedirects("loop"))
        with pytest.raises(FetchError) as exc_info:
            client.get_unpaid_report()
        assert not isinstance(exc_info.value, TransientFetchError)
        assert isinstance(exc_info.value.__cause__, requests.TooManyRedirects)
        assert session.request.call_count == 1
        assert client.stats["failures"] == 1

    def test_bad_base_url_is_fetch_error(self):
        client, _ = _make_client(requests.exceptions.MissingSchema("no scheme"))
        with pytest.raises(FetchError):
            client.get_unpaid_report()

    def test_max_retries_from_config(self):
        client, session = _make_client(
            *[_make_response(status=500) for _ in range(4)],
            max_retries=4,
        )
        with pytest.raises(TransientFetchError):
            client.get_unpaid_report()
        assert session.request.call_count == 4


# ===================================================================
# Lifecycle
# ===================================================================


class TestLifecycle:
    def test_injected_session_not_closed(self):
        client, session = _make_client()
        with client:
            pass
        session.close.assert_not_called()

    def test_owned_session_closed(self, monkeypatch):
        owned = MagicMock()
        owned.headers = {}
        monkeypatch.setattr(requests, "Session", lambda: owned)
        with ReportClient(_make_config()):
            pass
        owned.close.assert_called_once()


# ===================================================================
# Per-caller tokens
# ===================================================================


class TestWithToken:
    def test_token_sent_by_derived_client(self):
        client, session = _make_client(_make_response(payload=[]), api_token=None)
        client.with_token("user-token").get_unpaid_report()
        headers = session.request.call_args.kwargs["headers"]
        assert headers == {"Authorization": "Bearer user-token"}

    def test_same_token_returns_same_client(self):
        client, _ = _make_client()
        assert client.with_token("secret-token") is client

    def test_derived_client_does_not_close_session(self):
        client, session = _make_client(api_token=None)
        with client.with_token("user-token"):
            pass
        session.close.assert_not_called()
