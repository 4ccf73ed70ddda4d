"""
Typed Python client for zero-trust device settings policies.

Example:
    ```python
    from devicepolicy import DevicePolicies

    with DevicePolicies(api_token="...") as client:
        policies = client.policies.list("acct-id")
    ```
"""

from __future__ import annotations

__version__ = "0.3.0"

from .client import AsyncDevicePolicies, DevicePolicies
from .exceptions import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    DecodeError,
    DevicePolicyError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    TransportError,
    WriteNotAllowedError,
)
from .models import (
    CertificatesSetting,
    FallbackDomain,
    ListParams,
    PaginatedResponse,
    Policy,
    PolicyCreate,
    PolicyUpdate,
    ResultInfo,
    ServiceModeV2,
    SplitTunnel,
)
from .policies import Policies, WritePolicy
from .types import AccountId, PolicyId, ServiceMode, ZoneId

__all__ = [
    "__version__",
    # Clients
    "DevicePolicies",
    "AsyncDevicePolicies",
    # Policies
    "Policies",
    "WritePolicy",
    # Models
    "Policy",
    "PolicyCreate",
    "PolicyUpdate",
    "ServiceModeV2",
    "FallbackDomain",
    "SplitTunnel",
    "CertificatesSetting",
    "ListParams",
    "ResultInfo",
    "PaginatedResponse",
    # Types
    "AccountId",
    "ZoneId",
    "PolicyId",
    "ServiceMode",
    # Exceptions
    "DevicePolicyError",
    "TransportError",
    "NetworkError",
    "RequestTimeoutError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "APIError",
    "DecodeError",
    "WriteNotAllowedError",
]
