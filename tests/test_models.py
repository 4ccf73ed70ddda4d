from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from devicepolicy.codec import encode
from devicepolicy.models.entities import Policy, PolicyCreate, PolicyUpdate, ServiceModeV2
from devicepolicy.types import ServiceMode

FULL_POLICY = {
    "service_mode_v2": {"mode": "proxy", "port": 8080},
    "disable_auto_fallback": True,
    "fallback_domains": [
        {"suffix": "corp.example", "description": "intranet", "dns_server": ["10.0.0.53"]}
    ],
    "include": [{"address": "10.0.0.0/8", "description": "private"}],
    "exclude": [{"host": "zoom.us", "description": "video"}],
    "gateway_unique_id": "gw-1",
    "support_url": "https://help.example.com",
    "captive_portal": 180,
    "allow_mode_switch": False,
    "switch_locked": True,
    "allow_updates": False,
    "auto_connect": 0,
    "allowed_to_leave": False,
    "policy_id": "f174e90a-fafe-4643-bbbc-4a0ed4fc8415",
    "enabled": True,
    "name": "Contractors",
    "match": 'identity.email == "a@example.com"',
    "precedence": 100,
    "default": False,
    "exclude_office_ips": False,
    "description": "",
}


def test_partial_update_with_name_and_enabled_omits_everything_else() -> None:
    body = json.loads(encode(PolicyUpdate(name="Contractors", enabled=True)))
    assert body == {"name": "Contractors", "enabled": True}


def test_partial_update_keeps_explicit_false_zero_and_empty() -> None:
    update = PolicyUpdate(
        enabled=False,
        auto_connect=0,
        description="",
        exclude_office_ips=False,
    )
    assert update.to_payload() == {
        "enabled": False,
        "auto_connect": 0,
        "description": "",
        "exclude_office_ips": False,
    }


def test_partial_update_explicit_none_is_sent_as_null() -> None:
    body = json.loads(encode(PolicyUpdate(support_url=None)))
    assert body == {"support_url": None}


def test_empty_partial_update_serializes_to_empty_object() -> None:
    assert encode(PolicyUpdate()) == b"{}"


def test_is_set_tracks_presence_not_value() -> None:
    update = PolicyUpdate(enabled=False)
    assert update.is_set("enabled")
    assert not update.is_set("name")

    update.name = "later"
    assert update.is_set("name")

    with pytest.raises(AttributeError):
        update.is_set("nope")


def test_nested_service_mode_omits_unset_port() -> None:
    update = PolicyUpdate(service_mode_v2=ServiceModeV2(mode=ServiceMode.WARP))
    assert update.to_payload() == {"service_mode_v2": {"mode": "warp"}}


def test_nested_service_mode_omits_zero_port_and_empty_mode() -> None:
    update = PolicyUpdate(service_mode_v2=ServiceModeV2(mode=ServiceMode.WARP, port=0))
    assert json.loads(encode(update)) == {"service_mode_v2": {"mode": "warp"}}

    decoded = Policy.model_validate({"service_mode_v2": {"mode": "", "port": 8080}})
    assert decoded.to_payload() == {"service_mode_v2": {"port": 8080}}


def test_fallback_domain_without_suffix_decodes() -> None:
    policy = Policy.model_validate(
        {"policy_id": "p1", "fallback_domains": [{"dns_server": ["10.0.0.53"]}]}
    )
    assert policy.fallback_domains is not None
    assert policy.fallback_domains[0].suffix is None
    assert policy.to_payload() == {
        "policy_id": "p1",
        "fallback_domains": [{"dns_server": ["10.0.0.53"]}],
    }


def test_full_policy_round_trip_preserves_present_fields() -> None:
    policy = Policy.model_validate(FULL_POLICY)
    assert policy.service_mode_v2 is not None
    assert policy.service_mode_v2.mode is ServiceMode.PROXY
    assert policy.fallback_domains is not None
    assert policy.fallback_domains[0].dns_server == ["10.0.0.53"]
    assert json.loads(encode(policy)) == FULL_POLICY


def test_partial_policy_round_trip_does_not_invent_fields() -> None:
    payload = {"policy_id": "p1", "name": "Default", "default": True}
    policy = Policy.model_validate(payload)
    assert policy.enabled is None
    assert not policy.is_set("enabled")
    assert policy.to_payload() == payload


def test_default_flag_is_false_when_absent() -> None:
    policy = Policy.model_validate({"policy_id": "p1"})
    assert policy.default is False


def test_unknown_fields_are_ignored() -> None:
    policy = Policy.model_validate({"policy_id": "p1", "lan_allow_minutes": 30})
    assert policy.to_payload() == {"policy_id": "p1"}


def test_unknown_service_mode_is_tolerated() -> None:
    mode = ServiceModeV2.model_validate({"mode": "tunnel_v3"})
    assert mode.mode is not None
    assert mode.mode.value == "tunnel_v3"
    assert mode.mode.name.startswith("UNKNOWN_")
    assert mode.to_payload() == {"mode": "tunnel_v3"}


def test_policy_create_requires_name_match_and_precedence() -> None:
    with pytest.raises(ValidationError):
        PolicyCreate(name="x", match="any")  # type: ignore[call-arg]

    create = PolicyCreate(name="Contractors", match="any", precedence=10, enabled=True)
    assert create.to_payload() == {
        "name": "Contractors",
        "match": "any",
        "precedence": 10,
        "enabled": True,
    }
