"""
HTTP transport.

`HTTPClient` and `AsyncHTTPClient` execute a request given a method, a path
(including its query string) and an optional pre-serialized JSON body, and
return the raw response bytes. Non-2xx responses and connection failures are
raised as `TransportError` subclasses.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..exceptions import (
    NetworkError,
    RequestTimeoutError,
    WriteNotAllowedError,
    error_for_status,
)
from ..policies import Policies, WritePolicy
from ..types import BASE_URL
from .pipeline import (
    AsyncMiddleware,
    AsyncPipeline,
    Method,
    Middleware,
    Pipeline,
    SDKRequest,
    SDKResponse,
    compose,
    compose_async,
)

logger = logging.getLogger(__name__)

_JSON_CONTENT_TYPE = "application/json"


@dataclass
class ClientConfig:
    """Settings shared by the sync and async transports."""

    api_token: str | None = None
    base_url: str = BASE_URL
    timeout: float = 30.0
    log_requests: bool = False
    user_agent: str | None = None
    policies: Policies = field(default_factory=Policies)
    transport: httpx.BaseTransport | None = None
    async_transport: httpx.AsyncBaseTransport | None = None

    def default_headers(self) -> dict[str, str]:
        from .. import __version__

        headers = {
            "Accept": _JSON_CONTENT_TYPE,
            "User-Agent": self.user_agent or f"devicepolicy-python/{__version__}",
        }
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers


# =============================================================================
# Shared helpers
# =============================================================================


def _build_request(method: Method, path: str, body: bytes | None, timeout: float) -> SDKRequest:
    headers: list[tuple[str, str]] = []
    if body is not None:
        headers.append(("Content-Type", _JSON_CONTENT_TYPE))
    req = SDKRequest(method=method, url=path, headers=headers, content=body)
    req.context["timeout_seconds"] = timeout
    return req


def _error_details(content: bytes) -> tuple[str | None, list[dict[str, Any]]]:
    """Pull the first message and the error list out of an error envelope, if any."""
    try:
        payload = json.loads(content)
    except ValueError:
        return None, []
    if not isinstance(payload, dict):
        return None, []
    raw_errors = payload.get("errors")
    errors = [e for e in raw_errors if isinstance(e, dict)] if isinstance(raw_errors, list) else []
    message = None
    if errors:
        message = str(errors[0].get("message") or "") or None
    return message, errors


def _raise_for_status(resp: SDKResponse, req: SDKRequest) -> None:
    if 200 <= resp.status_code < 300:
        return
    message, errors = _error_details(resp.content)
    raise error_for_status(
        resp.status_code,
        message or f"{req.method} {req.url} failed with HTTP {resp.status_code}",
        errors=errors,
        response_body=resp.content,
    )


def _check_write_allowed(policies: Policies, req: SDKRequest) -> None:
    if req.write_intent and policies.write is WritePolicy.DENY:
        raise WriteNotAllowedError(
            f"Cannot {req.method} while write policy is DENY",
            method=req.method,
            url=req.url,
        )


def _to_sdk_response(response: httpx.Response, started: float) -> SDKResponse:
    sdk_response = SDKResponse(
        status_code=response.status_code,
        headers=list(response.headers.items()),
        content=response.content,
    )
    sdk_response.context["elapsed_seconds"] = time.monotonic() - started
    request_id = response.headers.get("cf-ray")
    if request_id:
        sdk_response.context["request_id"] = request_id
    return sdk_response


def _log_request(req: SDKRequest) -> None:
    logger.debug("-> %s %s", req.method, req.url)


def _log_response(req: SDKRequest, resp: SDKResponse) -> None:
    elapsed = resp.context.get("elapsed_seconds")
    elapsed_ms = int(elapsed * 1000) if elapsed is not None else -1
    request_id = resp.context.get("request_id")
    if request_id:
        logger.debug(
            "<- %s %s %s (%dms, ray %s)",
            resp.status_code,
            req.method,
            req.url,
            elapsed_ms,
            request_id,
        )
        return
    logger.debug("<- %s %s %s (%dms)", resp.status_code, req.method, req.url, elapsed_ms)


# =============================================================================
# Sync client
# =============================================================================


class HTTPClient:
    """Synchronous transport backed by `httpx.Client`."""

    def __init__(self, config: ClientConfig):
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            headers=config.default_headers(),
            timeout=config.timeout,
            transport=config.transport,
        )
        self._pipeline = compose(self._middlewares(), self._send)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _middlewares(self) -> list[Middleware]:
        config = self._config

        def write_guard(req: SDKRequest, next: Pipeline) -> SDKResponse:
            _check_write_allowed(config.policies, req)
            return next(req)

        def request_logger(req: SDKRequest, next: Pipeline) -> SDKResponse:
            _log_request(req)
            resp = next(req)
            _log_response(req, resp)
            return resp

        def status_check(req: SDKRequest, next: Pipeline) -> SDKResponse:
            resp = next(req)
            _raise_for_status(resp, req)
            return resp

        middlewares: list[Middleware] = [write_guard, status_check]
        if config.log_requests:
            middlewares.append(request_logger)
        return middlewares

    def _send(self, req: SDKRequest) -> SDKResponse:
        started = time.monotonic()
        try:
            response = self._client.request(
                req.method,
                req.url,
                content=req.content,
                headers=dict(req.headers),
                timeout=req.context.get("timeout_seconds", self._config.timeout),
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"{req.method} {req.url} timed out") from e
        except httpx.TransportError as e:
            raise NetworkError(f"{req.method} {req.url} failed: {e}") from e
        return _to_sdk_response(response, started)

    def execute(self, method: Method, path: str, body: bytes | None = None) -> bytes:
        """
        Execute a request and return the raw response body.

        Args:
            method: One of GET/POST/PATCH/DELETE
            path: Path relative to the base URL, including any query string
            body: Pre-serialized JSON body

        Raises:
            TransportError: On network failure or a non-2xx status
            WriteNotAllowedError: If a write is attempted under a DENY write policy
        """
        req = _build_request(method, path, body, self._config.timeout)
        return self._pipeline(req).content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HTTPClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


# =============================================================================
# Async client
# =============================================================================


class AsyncHTTPClient:
    """Asynchronous transport backed by `httpx.AsyncClient`."""

    def __init__(self, config: ClientConfig):
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers=config.default_headers(),
            timeout=config.timeout,
            transport=config.async_transport,
        )
        self._pipeline = compose_async(self._middlewares(), self._send)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _middlewares(self) -> list[AsyncMiddleware]:
        config = self._config

        async def write_guard(req: SDKRequest, next: AsyncPipeline) -> SDKResponse:
            _check_write_allowed(config.policies, req)
            return await next(req)

        async def request_logger(req: SDKRequest, next: AsyncPipeline) -> SDKResponse:
            _log_request(req)
            resp = await next(req)
            _log_response(req, resp)
            return resp

        async def status_check(req: SDKRequest, next: AsyncPipeline) -> SDKResponse:
            resp = await next(req)
            _raise_for_status(resp, req)
            return resp

        middlewares: list[AsyncMiddleware] = [write_guard, status_check]
        if config.log_requests:
            middlewares.append(request_logger)
        return middlewares

    async def _send(self, req: SDKRequest) -> SDKResponse:
        started = time.monotonic()
        try:
            response = await self._client.request(
                req.method,
                req.url,
                content=req.content,
                headers=dict(req.headers),
                timeout=req.context.get("timeout_seconds", self._config.timeout),
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"{req.method} {req.url} timed out") from e
        except httpx.TransportError as e:
            raise NetworkError(f"{req.method} {req.url} failed: {e}") from e
        return _to_sdk_response(response, started)

    async def execute(self, method: Method, path: str, body: bytes | None = None) -> bytes:
        """Async counterpart of `HTTPClient.execute`."""
        req = _build_request(method, path, body, self._config.timeout)
        resp = await self._pipeline(req)
        return resp.content

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> AsyncHTTPClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
