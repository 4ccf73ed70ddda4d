"""
Main device policy API client.

Provides a unified interface to the device settings policy endpoints.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import httpx

from .clients.http import AsyncHTTPClient, ClientConfig, HTTPClient
from .policies import Policies
from .services.certificates import AsyncZoneCertificateService, ZoneCertificateService
from .services.policies import AsyncDevicePolicyService, DevicePolicyService
from .types import BASE_URL

API_TOKEN_ENV = "DEVICEPOLICY_API_TOKEN"
BASE_URL_ENV = "DEVICEPOLICY_BASE_URL"


def _maybe_load_dotenv(
    *,
    load_dotenv: bool,
    dotenv_path: str | os.PathLike[str] | None = None,
    override: bool = False,
) -> None:
    if not load_dotenv:
        return
    try:
        import dotenv
    except ImportError as exc:
        raise ImportError(
            "Optional .env support requires python-dotenv; install `devicepolicy-sdk[cli]`."
        ) from exc
    path = Path(dotenv_path) if dotenv_path is not None else None
    dotenv.load_dotenv(dotenv_path=path, override=override)


class DevicePolicies:
    """
    Synchronous device policy API client.

    Example:
        ```python
        from devicepolicy import DevicePolicies, PolicyUpdate

        with DevicePolicies(api_token="...") as client:
            for policy in client.policies.list("acct-id").data:
                print(policy.policy_id, policy.name)

            client.policies.update(
                "acct-id",
                "policy-id",
                PolicyUpdate(name="Contractors", enabled=False),
            )
            client.certificates.update("zone-id", enabled=True)
        ```

    Attributes:
        policies: Device settings policy operations
        certificates: Zone client certificate operations
    """

    def __init__(
        self,
        api_token: str | None = None,
        *,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        log_requests: bool = False,
        user_agent: str | None = None,
        policies: Policies | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            api_token: Bearer token sent with every request
            base_url: API base URL (default: https://api.cloudflare.com/client/v4)
            timeout: Request timeout in seconds
            log_requests: Log every request/response at DEBUG level
            policies: Cross-cutting client policies (e.g. read-only mode)
            transport: Custom httpx transport (mainly for tests)
        """
        config = ClientConfig(
            api_token=api_token,
            base_url=base_url,
            timeout=timeout,
            log_requests=log_requests,
            user_agent=user_agent,
            policies=policies or Policies(),
            transport=transport,
        )
        self._http = HTTPClient(config)
        self._policies: DevicePolicyService | None = None
        self._certificates: ZoneCertificateService | None = None

    @classmethod
    def from_env(
        cls,
        *,
        load_dotenv: bool = False,
        dotenv_path: str | os.PathLike[str] | None = None,
        **kwargs: Any,
    ) -> DevicePolicies:
        """
        Build a client from ``DEVICEPOLICY_API_TOKEN`` / ``DEVICEPOLICY_BASE_URL``.

        Set `load_dotenv=True` to read a ``.env`` file first (requires python-dotenv).
        """
        _maybe_load_dotenv(load_dotenv=load_dotenv, dotenv_path=dotenv_path)
        token = os.getenv(API_TOKEN_ENV, "").strip()
        if not token:
            raise ValueError(f"Missing API token; set {API_TOKEN_ENV}")
        kwargs.setdefault("base_url", os.getenv(BASE_URL_ENV) or BASE_URL)
        return cls(api_token=token, **kwargs)

    def __enter__(self) -> DevicePolicies:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._http.close()

    @property
    def policies(self) -> DevicePolicyService:
        """Device settings policy operations."""
        if self._policies is None:
            self._policies = DevicePolicyService(self._http)
        return self._policies

    @property
    def certificates(self) -> ZoneCertificateService:
        """Zone client certificate operations."""
        if self._certificates is None:
            self._certificates = ZoneCertificateService(self._http)
        return self._certificates


class AsyncDevicePolicies:
    """
    Asynchronous device policy API client.

    Same interface as DevicePolicies but with async/await support.

    Example:
        ```python
        async with AsyncDevicePolicies(api_token="...") as client:
            async for policy in client.policies.all("acct-id"):
                print(policy.name)
        ```
    """

    def __init__(
        self,
        api_token: str | None = None,
        *,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        log_requests: bool = False,
        user_agent: str | None = None,
        policies: Policies | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ):
        config = ClientConfig(
            api_token=api_token,
            base_url=base_url,
            timeout=timeout,
            log_requests=log_requests,
            user_agent=user_agent,
            policies=policies or Policies(),
            async_transport=async_transport,
        )
        self._http = AsyncHTTPClient(config)
        self._policies: AsyncDevicePolicyService | None = None
        self._certificates: AsyncZoneCertificateService | None = None

    @property
    def policies(self) -> AsyncDevicePolicyService:
        if self._policies is None:
            self._policies = AsyncDevicePolicyService(self._http)
        return self._policies

    @property
    def certificates(self) -> AsyncZoneCertificateService:
        if self._certificates is None:
            self._certificates = AsyncZoneCertificateService(self._http)
        return self._certificates

    async def __aenter__(self) -> AsyncDevicePolicies:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http.close()
