"""
Backend forwarding client for the Gateway.
"""

import time
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

import httpx
from pydantic import BaseModel, Field

from shared.config import BackendPoolConfig
from shared.errors import (
    BackendApplicationError,
    BackendTimeout,
    GatewayError,
    MalformedBackendResponse,
    NetworkFailure,
    UnknownFailure,
)
from shared.logging import get_logger
from shared.metrics import MetricsCollector


class OutboundRequest(BaseModel):
    """Descriptor for a single outbound backend call."""

    method: str = "GET"
    body: Optional[Any] = None
    headers: Dict[str, str] = Field(default_factory=dict)


class Forwarder(Protocol):
    """Anything that can forward a backend-relative path and return its payload."""

    name: str

    async def forward(self, path: str, options: Optional[OutboundRequest] = None) -> Any:
        ...


class BackendClient:
    """Forwards gateway calls to one backend pool.

    One instance exists per pool. Instances differ only in their
    ``BackendPoolConfig``; each ``forward`` is exactly one outbound call.
    """

    def __init__(
        self,
        pool: BackendPoolConfig,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.pool = pool
        self.name = pool.name
        self.base_url = pool.base_url.rstrip('/')
        self.metrics = metrics
        self.logger = get_logger(f"gateway.backend_client.{pool.name}")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.pool.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Release pooled connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_headers(self, extra: Mapping[str, str]) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        headers.update(extra)

        # A caller-supplied credential for the pool's header wins over the service token
        present = {key.lower() for key in headers}
        credential = self.pool.auth_value()
        if credential and self.pool.auth_header.lower() not in present:
            headers[self.pool.auth_header] = credential
        return headers

    async def forward(self, path: str, options: Optional[OutboundRequest] = None) -> Any:
        """Call ``path`` on this pool and return the parsed JSON payload.

        Raises a ``GatewayError`` subclass on any failure.
        """
        options = options or OutboundRequest()
        method = options.method.upper()
        url = f"{self.base_url}{path}"
        headers = self._build_headers(options.headers)

        request_kwargs: Dict[str, Any] = {"headers": headers}
        if options.body is not None:
            request_kwargs["json"] = options.body

        start_time = time.time()
        outcome = "error"
        try:
            try:
                response = await self._get_client().request(method, url, **request_kwargs)
            except httpx.TimeoutException as exc:
                outcome = "timeout"
                self.logger.warning("Backend request timed out", url=url, method=method, error=str(exc))
                raise BackendTimeout(details={"url": url}) from exc
            except httpx.TransportError as exc:
                outcome = "unreachable"
                self.logger.warning("Backend unreachable", url=url, method=method, error=str(exc))
                raise NetworkFailure(details={"url": url}) from exc

            if not response.is_success:
                outcome = "backend_error"
                raise self._error_from_response(response, url)

            payload = self._parse_payload(response, url)
            outcome = "success"
            self.logger.debug(
                "Backend request succeeded",
                url=url,
                method=method,
                status_code=response.status_code,
            )
            return payload
        except GatewayError:
            raise
        except Exception as exc:
            self.logger.error("Backend request failed", url=url, method=method, error=str(exc))
            raise UnknownFailure(message=str(exc) or None, details={"url": url}) from exc
        finally:
            if self.metrics:
                self.metrics.record_backend_call(self.name, outcome, time.time() - start_time)

    def _parse_payload(self, response: httpx.Response, url: str) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            self.logger.error(
                "Backend returned invalid JSON",
                url=url,
                status_code=response.status_code,
            )
            raise MalformedBackendResponse(
                details={"url": url, "status_code": response.status_code}
            ) from exc

    def _error_from_response(self, response: httpx.Response, url: str) -> GatewayError:
        status_text = response.reason_phrase or f"HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            self.logger.error(
                "Backend error response is not JSON",
                url=url,
                status_code=response.status_code,
            )
            return MalformedBackendResponse(
                message=status_text,
                status_code=response.status_code,
                details={"url": url},
            )

        message, code = extract_error_fields(body)
        self.logger.info(
            "Backend returned an error",
            url=url,
            status_code=response.status_code,
            message=message,
            code=code,
        )
        return BackendApplicationError(
            message=message or status_text,
            status_code=response.status_code,
            code=code,
            details={"url": url},
        )


def extract_error_fields(body: Any) -> Tuple[Optional[str], Optional[str]]:
    """Pull ``(message, code)`` out of a backend JSON error body.

    Understands ``{"error": {"message", "code"}}``, ``{"error": "...", "code": "..."}``
    and ``{"message": "...", "code": "..."}``.
    """
    if not isinstance(body, dict):
        return None, None

    message: Optional[str] = None
    code: Optional[str] = None

    error = body.get("error")
    if isinstance(error, dict):
        message = _as_text(error.get("message"))
        code = _as_text(error.get("code"))
    elif isinstance(error, str):
        message = _as_text(error)

    if message is None:
        message = _as_text(body.get("message"))
    if code is None:
        code = _as_text(body.get("code"))
    return message, code


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None

