"""
Response envelopes.

Every API response wraps its payload as
``{"success": ..., "errors": [...], "messages": [...], "result": ...}``;
listing endpoints add a ``result_info`` block.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import Field

from .entities import CertificatesSetting, DevicePolicyModel, Policy
from .pagination import ResultInfo

T = TypeVar("T")


class ResponseMessage(DevicePolicyModel):
    code: int | None = None
    message: str = ""


class Envelope(DevicePolicyModel, Generic[T]):
    success: bool = True
    errors: list[ResponseMessage] = Field(default_factory=list)
    messages: list[ResponseMessage] = Field(default_factory=list)
    result: T | None = None


class PolicyEnvelope(Envelope[Policy]):
    pass


class PolicyListEnvelope(Envelope[list[Policy]]):
    result_info: ResultInfo = Field(default_factory=ResultInfo)


class PolicyDeleteEnvelope(Envelope[list[Policy]]):
    pass


class CertificatesEnvelope(Envelope[CertificatesSetting]):
    pass
