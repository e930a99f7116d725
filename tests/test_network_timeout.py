"""Unit tests for network timeout and retry logic."""

from unittest.mock import Mock, patch

import pytest
from requests.exceptions import ConnectionError, HTTPError, Timeout

from satnames.shared.network import (
    DEFAULT_RETRY_CONFIG,
    DEFAULT_TIMEOUT_CONFIG,
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
    classify_error,
    create_network_error,
    should_retry,
)


def make_response(status_code=200, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.content = b"{}" if payload is not None else text.encode()
    response.text = text
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = HTTPError(response=response)
    return response


def make_client(session, **kwargs):
    kwargs.setdefault("retry_config", RetryConfig(max_retries=2, base_delay=0.0))
    return NetworkClient("http://names.example.com", session=session, **kwargs)


class TestTimeoutConfig:
    def test_default_values(self):
        config = TimeoutConfig()
        assert config.connect_timeout == 5.0
        assert config.read_timeout == 15.0

    def test_request_timeout_tuple(self):
        config = TimeoutConfig(connect_timeout=3.0, read_timeout=10.0)
        assert config.request_timeout == (3.0, 10.0)


class TestRetryConfig:
    def test_default_values(self):
        config = RetryConfig()
        assert config.max_retries == 2
        assert config.base_delay == 0.5
        assert config.max_delay == 10.0

    def test_default_retryable_status_codes(self):
        config = RetryConfig()
        assert {408, 429, 500, 502, 503, 504} <= config.retryable_status_codes
        assert 404 not in config.retryable_status_codes

    def test_calculate_delay_exponential_growth(self):
        config = RetryConfig(base_delay=1.0, exponential_base=2.0, max_delay=100.0)
        assert config.calculate_delay(0) == 1.0
        assert config.calculate_delay(1) == 2.0
        assert config.calculate_delay(3) == 8.0

    def test_calculate_delay_is_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=5.0)
        assert config.calculate_delay(10) == 5.0

    def test_module_defaults(self):
        assert DEFAULT_TIMEOUT_CONFIG == TimeoutConfig()
        assert DEFAULT_RETRY_CONFIG.max_retries == RetryConfig().max_retries


class TestClassifyError:
    def test_timeout(self):
        assert classify_error(Timeout()) == NetworkErrorType.TIMEOUT

    def test_connection_error(self):
        assert classify_error(ConnectionError()) == NetworkErrorType.CONNECTION_ERROR

    def test_http_error(self):
        assert classify_error(HTTPError()) == NetworkErrorType.HTTP_ERROR

    def test_unknown(self):
        assert classify_error(ValueError("x")) == NetworkErrorType.UNKNOWN


class TestCreateNetworkError:
    def test_timeout_message_mentions_base_url(self):
        error = create_network_error(Timeout(), "http://names.example.com", "Lookup")
        assert error.error_type == NetworkErrorType.TIMEOUT
        assert "Lookup: " in error.message
        assert "http://names.example.com" in error.message

    def test_http_error_carries_status_and_detail(self):
        response = make_response(409, {"error": "Name already registered"})
        error = create_network_error(HTTPError(response=response), "http://x")
        assert error.status_code == 409
        assert error.response_text == "Name already registered"
        assert "HTTP error 409" in str(error)


class TestShouldRetry:
    def test_retries_timeouts_and_connection_errors(self):
        config = RetryConfig()
        assert should_retry(Timeout(), config) is True
        assert should_retry(ConnectionError(), config) is True

    def test_retries_retryable_status(self):
        response = make_response(503)
        assert should_retry(HTTPError(response=response), RetryConfig()) is True

    def test_does_not_retry_client_errors(self):
        response = make_response(402)
        assert should_retry(HTTPError(response=response), RetryConfig()) is False

    def test_does_not_retry_unknown(self):
        assert should_retry(ValueError("x"), RetryConfig()) is False


class TestNetworkClient:
    def test_get_success(self):
        session = Mock()
        session.get.return_value = make_response(200, {"outpoint": "abc_0"})
        client = make_client(session)

        assert client.get("/mine/alice") == {"outpoint": "abc_0"}
        session.get.assert_called_once()
        assert session.get.call_args.args[0] == "http://names.example.com/mine/alice"

    def test_get_uses_configured_timeout(self):
        session = Mock()
        session.get.return_value = make_response(200, {})
        client = make_client(session, timeout_config=TimeoutConfig(2.0, 4.0))

        client.get("/x")
        assert session.get.call_args.kwargs["timeout"] == (2.0, 4.0)

    def test_get_optional_returns_none_on_404(self):
        session = Mock()
        session.get.return_value = make_response(404)
        client = make_client(session)

        assert client.get_optional("/mine/nobody") is None
        assert session.get.call_count == 1

    def test_get_404_raises_http_error(self):
        session = Mock()
        session.get.return_value = make_response(404)
        client = make_client(session)

        with pytest.raises(NetworkError) as exc_info:
            client.get("/mine/nobody")
        assert exc_info.value.error_type == NetworkErrorType.HTTP_ERROR
        assert exc_info.value.status_code == 404

    def test_post_sends_form_data(self):
        session = Mock()
        session.post.return_value = make_response(200, {"success": True})
        client = make_client(session)

        result = client.post("/register", data={"handle": "alice"})
        assert result == {"success": True}
        assert session.post.call_args.kwargs["data"] == {"handle": "alice"}

    def test_empty_body_decodes_to_empty_dict(self):
        session = Mock()
        session.post.return_value = make_response(200, None, text="")
        client = make_client(session)

        assert client.post("/disconnect") == {}

    def test_list_body_is_wrapped(self):
        session = Mock()
        session.get.return_value = make_response(200, [1, 2])
        client = make_client(session)

        assert client.get("/x") == {"data": [1, 2]}

    def test_retry_on_timeout_then_success(self):
        session = Mock()
        session.get.side_effect = [Timeout("slow"), make_response(200, {"ok": True})]
        client = make_client(session)

        with patch("satnames.shared.network.time.sleep") as sleep:
            assert client.get("/x") == {"ok": True}
        assert session.get.call_count == 2
        sleep.assert_called_once()

    def test_gives_up_after_max_retries(self):
        retry_calls = []
        session = Mock()
        session.get.side_effect = Timeout("slow")
        client = make_client(
            session,
            on_retry=lambda attempt, error, delay: retry_calls.append(attempt),
        )

        with patch("satnames.shared.network.time.sleep"):
            with pytest.raises(NetworkError) as exc_info:
                client.get("/x")

        assert exc_info.value.error_type == NetworkErrorType.TIMEOUT
        assert session.get.call_count == 3
        assert retry_calls == [1, 2]

    def test_no_retry_on_client_error(self):
        session = Mock()
        session.post.return_value = make_response(402, {"error": "Payment required"})
        client = make_client(session)

        with pytest.raises(NetworkError) as exc_info:
            client.post("/register")
        assert exc_info.value.status_code == 402
        assert session.post.call_count == 1

    def test_zero_retries_never_repeats(self):
        session = Mock()
        session.post.side_effect = ConnectionError("down")
        client = make_client(session, retry_config=RetryConfig(max_retries=0))

        with pytest.raises(NetworkError):
            client.post("/send-bsv")
        assert session.post.call_count == 1
