"""
Identifier types, enums and API constants.
"""

from __future__ import annotations

from enum import Enum
from typing import NewType

BASE_URL = "https://api.cloudflare.com/client/v4"

ACCOUNT_ROUTE_ROOT = "accounts"
ZONE_ROUTE_ROOT = "zones"

# Page size used for policy listings when the caller does not choose one.
DEFAULT_POLICIES_PER_PAGE = 20

AccountId = NewType("AccountId", str)
ZoneId = NewType("ZoneId", str)
PolicyId = NewType("PolicyId", str)


class ServiceMode(str, Enum):
    """WARP client service mode."""

    ONE_DOT_ONE = "1dot1"
    WARP = "warp"
    PROXY = "proxy"
    POSTURE_ONLY = "posture_only"
    WARP_TUNNEL_ONLY = "warp_tunnel_only"

    @classmethod
    def _missing_(cls, value: object) -> ServiceMode:
        # Newer API versions add modes; keep the raw value instead of failing.
        if not isinstance(value, str):
            return None  # type: ignore[return-value]
        member = str.__new__(cls, value)
        member._name_ = f"UNKNOWN_{value.upper()}"
        member._value_ = value
        return member
