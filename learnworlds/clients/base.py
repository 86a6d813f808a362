"""Base API client with auth injection, retry on 401 and error normalization."""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from learnworlds.exceptions import ApiError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_ERRORS: dict[int, tuple[ErrorCode, str]] = {
    401: (ErrorCode.UNAUTHORIZED, "Invalid API key or authentication failed"),
    403: (ErrorCode.FORBIDDEN, "Access denied"),
    404: (ErrorCode.NOT_FOUND, "Resource not found"),
    422: (ErrorCode.VALIDATION_ERROR, "Validation failed"),
    429: (ErrorCode.RATE_LIMIT, "Rate limit exceeded"),
}

# Number of times a request may be resent after refreshing credentials.
MAX_AUTH_RETRIES = 1


@dataclass
class RequestMetrics:
    """Metrics for API requests."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_retries: int = 0
    total_duration_ms: float = 0
    request_durations: list[float] = field(default_factory=list)

    def record_request(self, duration_ms: float, success: bool) -> None:
        """Record a request."""
        self.total_requests += 1
        self.total_duration_ms += duration_ms
        self.request_durations.append(duration_ms)
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1

    def record_retry(self) -> None:
        """Record a retry."""
        self.total_retries += 1

    @property
    def avg_duration_ms(self) -> float:
        """Average request duration."""
        if not self.request_durations:
            return 0
        return sum(self.request_durations) / len(self.request_durations)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "total_retries": self.total_retries,
            "total_duration_ms": round(self.total_duration_ms, 2),
            "avg_duration_ms": round(self.avg_duration_ms, 2),
        }


def _decode_body(response: httpx.Response) -> Any:
    """Decoded JSON body, or the raw text when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


class BaseAPIClient(ABC):
    """Base class for JSON API clients.

    Every response is expected in an envelope of the form
    ``{"success": bool, "data": ..., "message": ..., "errors": ...}``.
    All failures are raised as ApiError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize base API client.

        Args:
            base_url: Base URL for the API
            timeout: Request timeout in seconds
            transport: Optional httpx transport, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        # Metrics tracking
        self.metrics = RequestMetrics()

        self.http = httpx.AsyncClient(
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    @abstractmethod
    async def get_auth_headers(self) -> dict:
        """Get authentication headers for requests.

        Returns an empty dict when no credentials are available.
        """

    def can_refresh_auth(self) -> bool:
        """Whether credentials can be refreshed after a 401."""
        return False

    async def refresh_auth(self) -> None:
        """Refresh credentials after a 401. No-op unless can_refresh_auth() is overridden."""

    async def request(
        self,
        method: str,
        endpoint: str,
        json_data: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Make a request and unwrap the response envelope.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (will be joined with base_url)
            json_data: JSON body data
            params: Query parameters; None values are dropped

        Returns:
            The envelope's ``data`` member

        Raises:
            ApiError: On any failure, including ``success: false`` envelopes
        """
        response = await self._make_request(method, endpoint, params=params, json_data=json_data)
        payload = _decode_body(response)

        if not isinstance(payload, dict) or not payload.get("success"):
            message = payload.get("message") if isinstance(payload, dict) else None
            errors = payload.get("errors") if isinstance(payload, dict) else payload
            logger.warning(
                "API reported failure",
                extra={"method": method, "endpoint": endpoint, "status_code": response.status_code},
            )
            raise ApiError(
                ErrorCode.API_ERROR,
                message or "API request failed",
                details=errors,
            )

        return payload.get("data")

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_data: Any = None,
    ) -> httpx.Response:
        """Build an authenticated request and send it."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        if params:
            params = {k: v for k, v in params.items() if v is not None} or None

        headers = await self.get_auth_headers()

        try:
            request = self.http.build_request(
                method,
                url,
                params=params,
                json=json_data,
                headers=headers,
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            logger.error(
                "Could not build API request",
                extra={"method": method, "endpoint": endpoint, "error": str(e)},
            )
            raise self.handle_error(e) from e

        return await self._send(request, endpoint)

    async def _send(
        self,
        request: httpx.Request,
        endpoint: str,
        attempt: int = 0,
    ) -> httpx.Response:
        """Send a request, retrying once with refreshed credentials on 401.

        Args:
            request: Prepared request
            endpoint: Endpoint, for logging
            attempt: Number of auth retries already made for this request

        Returns:
            Successful response

        Raises:
            ApiError: On transport failure or non-2xx status
        """
        start_time = time.time()

        logger.debug(
            f"Making {request.method} request",
            extra={"url": str(request.url), "attempt": attempt},
        )

        try:
            response = await self.http.send(request)
        except httpx.TransportError as e:
            duration_ms = (time.time() - start_time) * 1000
            self.metrics.record_request(duration_ms, success=False)

            logger.error(
                "API request failed",
                extra={
                    "method": request.method,
                    "endpoint": endpoint,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                    "attempt": attempt,
                }
            )
            raise self.handle_error(e) from e

        duration_ms = (time.time() - start_time) * 1000
        self.metrics.record_request(duration_ms, success=response.is_success)

        logger.info(
            "API request completed",
            extra={
                "method": request.method,
                "endpoint": endpoint,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "attempt": attempt,
                "response_size_bytes": len(response.content),
            }
        )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if (
                response.status_code == 401
                and attempt < MAX_AUTH_RETRIES
                and self.can_refresh_auth()
            ):
                return await self._retry_with_refreshed_auth(request, endpoint, e, attempt)
            raise self.handle_error(e) from e

        return response

    async def _retry_with_refreshed_auth(
        self,
        request: httpx.Request,
        endpoint: str,
        error: httpx.HTTPStatusError,
        attempt: int,
    ) -> httpx.Response:
        """Refresh credentials and resend the request once.

        If the refresh fails the original 401 is raised.
        """
        self.metrics.record_retry()
        logger.warning(
            "Authentication failed, refreshing credentials and retrying",
            extra={"endpoint": endpoint, "attempt": attempt + 1},
        )

        try:
            await self.refresh_auth()
            auth_headers = await self.get_auth_headers()
        except Exception as refresh_error:
            logger.error(
                "Credential refresh failed",
                extra={"endpoint": endpoint, "error": str(refresh_error)},
            )
            raise self.handle_error(error) from error

        request.headers.pop("Authorization", None)
        request.headers.update(auth_headers)
        return await self._send(request, endpoint, attempt=attempt + 1)

    def handle_error(self, error: Exception) -> ApiError:
        """Normalize a failed request into an ApiError.

        Args:
            error: HTTPStatusError when a response was received,
                TransportError when none was, anything else when the
                request could not be built

        Returns:
            ApiError with a stable code
        """
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            details = _decode_body(error.response)
            code, default_message = STATUS_ERRORS.get(status, (ErrorCode.API_ERROR, "API Error"))

            server_message = details.get("message") if isinstance(details, dict) else None
            if not isinstance(server_message, str) or not server_message:
                server_message = None

            return ApiError(
                code,
                server_message or default_message,
                status=status,
                details=details,
            )

        if isinstance(error, httpx.TransportError):
            return ApiError(ErrorCode.NETWORK_ERROR, "Network error - unable to reach API")

        return ApiError(ErrorCode.UNKNOWN_ERROR, str(error) or "Unknown error occurred")
