"""
Device policy data models.

All Pydantic models are available from this module.
"""

from __future__ import annotations

from .entities import (
    CertificatesSetting,
    DevicePolicyModel,
    FallbackDomain,
    Policy,
    PolicyCreate,
    PolicyUpdate,
    ServiceModeV2,
    SplitTunnel,
)
from .envelope import (
    CertificatesEnvelope,
    Envelope,
    PolicyDeleteEnvelope,
    PolicyEnvelope,
    PolicyListEnvelope,
    ResponseMessage,
)
from .pagination import ListParams, PageCursor, PaginatedResponse, ResultInfo

__all__ = [
    # Base
    "DevicePolicyModel",
    # Policy
    "Policy",
    "PolicyCreate",
    "PolicyUpdate",
    "ServiceModeV2",
    "FallbackDomain",
    "SplitTunnel",
    # Certificates
    "CertificatesSetting",
    # Envelopes
    "Envelope",
    "ResponseMessage",
    "PolicyEnvelope",
    "PolicyListEnvelope",
    "PolicyDeleteEnvelope",
    "CertificatesEnvelope",
    # Pagination
    "ListParams",
    "ResultInfo",
    "PageCursor",
    "PaginatedResponse",
]
