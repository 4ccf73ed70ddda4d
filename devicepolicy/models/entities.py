"""
Device settings policy models.

Every policy attribute is independently optional. Presence is tracked through
pydantic's ``model_fields_set``: a field the server (or caller) never supplied
is *absent* and is never serialized, while a field explicitly set to ``False``,
``0``, ``""`` or ``None`` is *present* and is sent as-is. ``ServiceModeV2`` is
the one exception: an empty mode or a zero port is dropped on encode.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

from ..types import PolicyId, ServiceMode


class DevicePolicyModel(BaseModel):
    """Base model for all API payloads."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        validate_assignment=True,
    )

    def is_set(self, name: str) -> bool:
        """Whether `name` was explicitly provided (even as a zero/empty value)."""
        if name not in type(self).model_fields:
            raise AttributeError(f"{type(self).__name__} has no field {name!r}")
        return name in self.model_fields_set

    def to_payload(self) -> dict[str, Any]:
        """JSON-compatible dict holding only the fields that are present."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# =============================================================================
# Nested types
# =============================================================================


class ServiceModeV2(DevicePolicyModel):
    """Client service mode; an empty mode or a zero port is never sent."""

    mode: ServiceMode | None = None
    port: int | None = None

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if value}


class FallbackDomain(DevicePolicyModel):
    """Domain whose DNS queries bypass Gateway and go to the listed servers."""

    suffix: str | None = None
    description: str | None = None
    dns_server: list[str] | None = None


class SplitTunnel(DevicePolicyModel):
    """An include/exclude split-tunnel entry (either `address` or `host`)."""

    address: str | None = None
    host: str | None = None
    description: str | None = None


class CertificatesSetting(DevicePolicyModel):
    """Whether a zone provisions device client certificates."""

    enabled: bool


# =============================================================================
# Policy
# =============================================================================


class Policy(DevicePolicyModel):
    """A device settings policy as returned by the API."""

    service_mode_v2: ServiceModeV2 | None = None
    disable_auto_fallback: bool | None = None
    fallback_domains: list[FallbackDomain] | None = None
    include: list[SplitTunnel] | None = None
    exclude: list[SplitTunnel] | None = None
    gateway_unique_id: str | None = None
    support_url: str | None = None
    captive_portal: int | None = None
    allow_mode_switch: bool | None = None
    switch_locked: bool | None = None
    allow_updates: bool | None = None
    auto_connect: int | None = None
    allowed_to_leave: bool | None = None
    policy_id: PolicyId | None = None
    enabled: bool | None = None
    name: str | None = None
    match: str | None = None
    precedence: int | None = None
    default: bool = False
    exclude_office_ips: bool | None = None
    description: str | None = None


class PolicyUpdate(DevicePolicyModel):
    """
    Partial update of a device settings policy.

    Only the fields passed to the constructor (or assigned afterwards) are sent.
    Passing ``None`` explicitly sends JSON ``null``, which clears the value on
    the server.

    Example:
        ```python
        PolicyUpdate(name="Contractors", enabled=False).to_payload()
        # {"name": "Contractors", "enabled": False}
        ```
    """

    disable_auto_fallback: bool | None = None
    captive_portal: int | None = None
    allow_mode_switch: bool | None = None
    switch_locked: bool | None = None
    allow_updates: bool | None = None
    auto_connect: int | None = None
    allowed_to_leave: bool | None = None
    support_url: str | None = None
    service_mode_v2: ServiceModeV2 | None = None
    precedence: int | None = None
    name: str | None = None
    match: str | None = None
    enabled: bool | None = None
    exclude_office_ips: bool | None = None
    description: str | None = None


class PolicyCreate(PolicyUpdate):
    """Data for a new custom policy; `name`, `match` and `precedence` are required."""

    name: str = Field(..., min_length=1)
    match: str = Field(..., min_length=1)
    precedence: int
