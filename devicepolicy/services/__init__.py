"""API services."""

from __future__ import annotations

from .certificates import AsyncZoneCertificateService, ZoneCertificateService
from .policies import (
    AsyncDevicePolicyService,
    AsyncPolicyListFetcher,
    DevicePolicyService,
    PolicyListFetcher,
)

__all__ = [
    "AsyncDevicePolicyService",
    "AsyncPolicyListFetcher",
    "AsyncZoneCertificateService",
    "DevicePolicyService",
    "PolicyListFetcher",
    "ZoneCertificateService",
]
