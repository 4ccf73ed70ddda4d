from __future__ import annotations

import pytest

from devicepolicy.codec import decode, decode_envelope, encode
from devicepolicy.exceptions import APIError, DecodeError
from devicepolicy.models.entities import CertificatesSetting
from devicepolicy.models.envelope import PolicyListEnvelope
from devicepolicy.models.pagination import ListParams
from devicepolicy.uri import build_uri, path


def test_path_joins_and_encodes_segments() -> None:
    assert path("accounts", "acct1", "devices", "policy") == "/accounts/acct1/devices/policy"
    assert path("zones", "a b") == "/zones/a%20b"


def test_build_uri_omits_unset_params() -> None:
    assert build_uri("/x") == "/x"
    assert build_uri("/x", ListParams()) == "/x"
    assert build_uri("/x", ListParams(per_page=20)) == "/x?per_page=20"
    assert build_uri("/x", ListParams(page=2, per_page=20)) == "/x?page=2&per_page=20"
    assert build_uri("/x", {"a": None, "b": "c"}) == "/x?b=c"


def test_encode_dict_is_compact_json() -> None:
    assert encode({"enabled": True}) == b'{"enabled":true}'
    assert encode(CertificatesSetting(enabled=False)) == b'{"enabled":false}'


def test_decode_list_envelope() -> None:
    envelope = decode(
        b'{"success":true,"errors":[],"messages":[],"result":[{"policy_id":"p1"}],'
        b'"result_info":{"page":1,"per_page":20,"count":1,"total_count":1,"total_pages":1}}',
        PolicyListEnvelope,
    )
    assert envelope.result is not None
    assert envelope.result[0].policy_id == "p1"
    assert envelope.result_info.total_count == 1


def test_decode_rejects_invalid_json() -> None:
    with pytest.raises(DecodeError) as excinfo:
        decode(b"{not json", PolicyListEnvelope)
    assert excinfo.value.shape == "PolicyListEnvelope"
    assert excinfo.value.__cause__ is not None


def test_decode_envelope_rejects_unsuccessful_response() -> None:
    with pytest.raises(APIError) as excinfo:
        decode_envelope(
            b'{"success":false,"errors":[{"code":10000,"message":"Authentication error"}]}',
            PolicyListEnvelope,
        )
    assert excinfo.value.errors == [{"code": 10000, "message": "Authentication error"}]
    assert excinfo.value.status_code is None
