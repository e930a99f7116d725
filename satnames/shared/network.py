"""HTTP access for the name service, the marketplace index and the wallet bridge.

Every call goes through ``NetworkClient``, which applies the connect/read
timeouts, retries transient failures with exponential backoff and turns
whatever ``requests`` raised into a ``NetworkError``.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar

import requests
from requests.exceptions import ConnectionError, HTTPError, Timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NetworkErrorType(Enum):
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    HTTP_ERROR = "http_error"
    UNKNOWN = "unknown"


@dataclass
class NetworkError(Exception):
    error_type: NetworkErrorType
    message: str
    original_error: Exception | None = None
    status_code: int | None = None
    response_text: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass
class TimeoutConfig:
    connect_timeout: float = 5.0
    read_timeout: float = 15.0

    @property
    def request_timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


@dataclass
class RetryConfig:
    max_retries: int = 2
    base_delay: float = 0.5
    max_delay: float = 10.0
    exponential_base: float = 2.0
    retryable_status_codes: set[int] = field(
        default_factory=lambda: {408, 429, 500, 502, 503, 504}
    )

    def calculate_delay(self, attempt: int) -> float:
        return min(self.base_delay * self.exponential_base**attempt, self.max_delay)


DEFAULT_TIMEOUT_CONFIG = TimeoutConfig()
DEFAULT_RETRY_CONFIG = RetryConfig()

# ConnectTimeout is both a Timeout and a ConnectionError; it counts as a timeout.
_ERROR_TYPES: tuple[tuple[type[Exception], NetworkErrorType], ...] = (
    (Timeout, NetworkErrorType.TIMEOUT),
    (ConnectionError, NetworkErrorType.CONNECTION_ERROR),
    (HTTPError, NetworkErrorType.HTTP_ERROR),
)


def classify_error(error: Exception) -> NetworkErrorType:
    for exc_type, error_type in _ERROR_TYPES:
        if isinstance(error, exc_type):
            return error_type
    return NetworkErrorType.UNKNOWN


def _status_of(error: Exception) -> int | None:
    return getattr(getattr(error, "response", None), "status_code", None)


def _response_detail(response: Any) -> str | None:
    """Pull the backend's ``error``/``message`` field out of a failed response."""
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return getattr(response, "text", None)
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or str(body)
    return str(body)


def create_network_error(error: Exception, base_url: str, context: str = "") -> NetworkError:
    error_type = classify_error(error)
    prefix = f"{context}: " if context else ""

    if error_type == NetworkErrorType.HTTP_ERROR:
        status_code = _status_of(error)
        detail = _response_detail(getattr(error, "response", None))
        return NetworkError(
            error_type=error_type,
            message=f"{prefix}HTTP error {status_code}: {detail or 'Unknown error'}",
            original_error=error,
            status_code=status_code,
            response_text=detail,
        )

    if error_type == NetworkErrorType.TIMEOUT:
        message = f"{prefix}Request timed out. Service may be unavailable: {base_url}"
    elif error_type == NetworkErrorType.CONNECTION_ERROR:
        message = f"{prefix}Cannot connect to {base_url}. Check your network connection."
    else:
        message = f"{prefix}Network error: {error}"
    return NetworkError(error_type=error_type, message=message, original_error=error)


def should_retry(error: Exception, retry_config: RetryConfig) -> bool:
    error_type = classify_error(error)
    if error_type in (NetworkErrorType.TIMEOUT, NetworkErrorType.CONNECTION_ERROR):
        return True
    if error_type == NetworkErrorType.HTTP_ERROR:
        return _status_of(error) in retry_config.retryable_status_codes
    return False


class NetworkClient:
    """JSON-over-HTTP client bound to one base URL."""

    def __init__(
        self,
        base_url: str,
        timeout_config: TimeoutConfig | None = None,
        retry_config: RetryConfig | None = None,
        on_retry: Callable[[int, Exception, float], None] | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_config = timeout_config or DEFAULT_TIMEOUT_CONFIG
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG
        self.on_retry = on_retry
        self._session = session or requests.Session()

    def _execute_with_retry(self, operation: Callable[[], T], context: str = "") -> T:
        attempts = self.retry_config.max_retries + 1
        attempt = 0
        while True:
            try:
                return operation()
            except Exception as e:
                attempt += 1
                if attempt >= attempts or not should_retry(e, self.retry_config):
                    raise create_network_error(e, self.base_url, context) from e

                delay = self.retry_config.calculate_delay(attempt - 1)
                logger.warning(
                    "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                    context or "Request",
                    attempt,
                    attempts,
                    delay,
                    e,
                )
                if self.on_retry:
                    self.on_retry(attempt, e, delay)
                time.sleep(delay)

    @staticmethod
    def _decode(response: requests.Response) -> dict[str, Any]:
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError:
            return {"message": response.text}
        return body if isinstance(body, dict) else {"data": body}

    def _send(
        self,
        method: str,
        endpoint: str,
        context: str,
        missing_ok: bool = False,
        **kwargs,
    ) -> dict[str, Any] | None:
        url = f"{self.base_url}{endpoint}"
        kwargs.setdefault("timeout", self.timeout_config.request_timeout)
        send = getattr(self._session, method)

        def operation() -> dict[str, Any] | None:
            response = send(url, **kwargs)
            if missing_ok and response.status_code == 404:
                return None
            response.raise_for_status()
            return self._decode(response)

        return self._execute_with_retry(operation, context)

    def get(self, endpoint: str, context: str = "", **kwargs) -> dict[str, Any]:
        return self._send("get", endpoint, context, **kwargs)

    def get_optional(self, endpoint: str, context: str = "", **kwargs) -> dict[str, Any] | None:
        """Like ``get`` but a 404 answer is ``None`` instead of an error."""
        return self._send("get", endpoint, context, missing_ok=True, **kwargs)

    def post(self, endpoint: str, context: str = "", **kwargs) -> dict[str, Any]:
        return self._send("post", endpoint, context, **kwargs)
