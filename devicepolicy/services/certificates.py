"""
Zone device client certificate setting.

When enabled, the zone is used to provision client certificates for managed
devices of the account.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..codec import decode_envelope, encode
from ..exceptions import DecodeError
from ..models.entities import CertificatesSetting
from ..models.envelope import CertificatesEnvelope
from ..types import ZONE_ROUTE_ROOT, ZoneId
from ..uri import path
from ._ids import require_id

if TYPE_CHECKING:
    from ..clients.http import AsyncHTTPClient, HTTPClient


def _certificates_path(zone_id: ZoneId | str) -> str:
    zone = require_id(zone_id, "zone_id")
    return path(ZONE_ROUTE_ROOT, zone, "devices", "policy", "certificates")


def _setting(content: bytes) -> CertificatesSetting:
    envelope = decode_envelope(content, CertificatesEnvelope)
    if envelope.result is None:
        raise DecodeError("Certificates response has no result", shape="CertificatesEnvelope")
    return envelope.result


class ZoneCertificateService:
    """Read and toggle client certificate provisioning for a zone."""

    def __init__(self, client: HTTPClient):
        self._client = client

    def get(self, zone_id: ZoneId | str) -> CertificatesSetting:
        """Get whether the zone provisions device client certificates."""
        return _setting(self._client.execute("GET", _certificates_path(zone_id)))

    def update(self, zone_id: ZoneId | str, enabled: bool) -> CertificatesSetting:
        """
        Enable or disable client certificate provisioning for a zone.

        Args:
            zone_id: The zone id
            enabled: New setting

        Returns:
            The setting as stored by the API.
        """
        body = encode(CertificatesSetting(enabled=enabled))
        return _setting(self._client.execute("PATCH", _certificates_path(zone_id), body))


class AsyncZoneCertificateService:
    """Async version of ZoneCertificateService."""

    def __init__(self, client: AsyncHTTPClient):
        self._client = client

    async def get(self, zone_id: ZoneId | str) -> CertificatesSetting:
        return _setting(await self._client.execute("GET", _certificates_path(zone_id)))

    async def update(self, zone_id: ZoneId | str, enabled: bool) -> CertificatesSetting:
        body = encode(CertificatesSetting(enabled=enabled))
        return _setting(await self._client.execute("PATCH", _certificates_path(zone_id), body))
