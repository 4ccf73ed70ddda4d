from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

pytest.importorskip("rich_click")
pytest.importorskip("rich")

try:
    import respx
except ModuleNotFoundError:  # pragma: no cover - optional dev dependency
    respx = None  # type: ignore[assignment]

from click.testing import CliRunner
from httpx import Response

from devicepolicy.cli.logging import configure_logging, restore_logging
from devicepolicy.cli.main import cli

if respx is None:  # pragma: no cover
    pytest.skip("respx is not installed", allow_module_level=True)

API = "https://api.cloudflare.com/client/v4"
ENV = {"DEVICEPOLICY_API_TOKEN": "test-token"}


def _list_page(items: list[dict[str, object]], *, page: int, total_pages: int) -> dict[str, object]:
    return {
        "success": True,
        "errors": [],
        "messages": [],
        "result": items,
        "result_info": {
            "page": page,
            "per_page": 20,
            "count": len(items),
            "total_count": 25,
            "total_pages": total_pages,
        },
    }


def test_policy_ls_fetches_all_pages(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.get(f"{API}/accounts/acct1/devices/policies")
    route.side_effect = [
        Response(200, json=_list_page([{"policy_id": "p1", "name": "A"}], page=1, total_pages=2)),
        Response(200, json=_list_page([{"policy_id": "p2", "name": "B"}], page=2, total_pages=2)),
    ]

    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "policy", "ls", "acct1"], env=ENV)
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output.strip())
    assert payload["ok"] is True
    assert [p["policyId"] for p in payload["data"]["policies"]] == ["p1", "p2"]
    assert payload["meta"]["pagination"]["autoPaginated"] is True
    assert payload["meta"]["pagination"]["resultInfo"]["page"] == 2
    assert route.call_count == 2
    assert route.calls[0].request.headers["authorization"] == "Bearer test-token"


def test_policy_ls_single_page(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.get(f"{API}/accounts/acct1/devices/policies").mock(
        return_value=Response(200, json=_list_page([{"policy_id": "p1"}], page=1, total_pages=2))
    )

    runner = CliRunner()
    result = runner.invoke(
        cli, ["--json", "policy", "ls", "acct1", "--page", "1", "--per-page", "5"], env=ENV
    )
    assert result.exit_code == 0, result.output
    assert route.call_count == 1
    assert dict(route.calls[0].request.url.params) == {"page": "1", "per_page": "5"}


def test_policy_get_default_when_no_id(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(f"{API}/accounts/acct1/devices/policy").mock(
        return_value=Response(
            200, json={"success": True, "result": {"policy_id": "d1", "default": True}}
        )
    )

    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "policy", "get", "acct1"], env=ENV)
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output.strip())
    assert payload["data"]["policy"] == {"policy_id": "d1", "default": True}
    assert payload["meta"]["resolved"]["policy"]["default"] is True


def test_policy_update_sends_only_passed_options(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.patch(f"{API}/accounts/acct1/devices/policy/p1").mock(
        return_value=Response(
            200, json={"success": True, "result": {"policy_id": "p1", "enabled": False}}
        )
    )

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["--json", "policy", "update", "acct1", "p1", "--disabled", "--auto-connect", "0"],
        env=ENV,
    )
    assert result.exit_code == 0, result.output
    assert json.loads(route.calls[0].request.content) == {"enabled": False, "auto_connect": 0}


def test_policy_update_without_fields_is_a_usage_error() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "policy", "update", "acct1", "p1"], env=ENV)
    assert result.exit_code == 2
    payload = json.loads(result.output.strip())
    assert payload["ok"] is False
    assert payload["error"]["type"] == "usage_error"


def test_policy_create_requires_core_fields() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "policy", "create", "acct1", "--name", "x"], env=ENV)
    assert result.exit_code == 2
    payload = json.loads(result.output.strip())
    assert "--match" in payload["error"]["message"]


def test_policy_create_with_service_mode(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.post(f"{API}/accounts/acct1/devices/policy").mock(
        return_value=Response(200, json={"success": True, "result": {"policy_id": "new"}})
    )

    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "--json",
            "policy",
            "create",
            "acct1",
            "--name",
            "Proxy users",
            "--match",
            "any",
            "--precedence",
            "5",
            "--service-mode",
            "proxy",
            "--service-mode-port",
            "8080",
        ],
        env=ENV,
    )
    assert result.exit_code == 0, result.output
    assert json.loads(route.calls[0].request.content) == {
        "name": "Proxy users",
        "match": "any",
        "precedence": 5,
        "service_mode_v2": {"mode": "proxy", "port": 8080},
    }


def test_policy_delete_requires_yes() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "policy", "delete", "acct1", "p1"], env=ENV)
    assert result.exit_code == 2
    payload = json.loads(result.output.strip())
    assert "--yes" in payload["error"]["hint"]


def test_policy_delete_lists_remaining(respx_mock: respx.MockRouter) -> None:
    respx_mock.delete(f"{API}/accounts/acct1/devices/policy/p1").mock(
        return_value=Response(200, json={"success": True, "result": [{"policy_id": "p2"}]})
    )

    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "policy", "delete", "acct1", "p1", "--yes"], env=ENV)
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output.strip())
    assert payload["data"]["deleted"] == "p1"
    assert [p["policyId"] for p in payload["data"]["policies"]] == ["p2"]


@pytest.mark.respx(assert_all_called=False)
def test_readonly_blocks_writes_before_network(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.patch(f"{API}/accounts/acct1/devices/policy")

    runner = CliRunner()
    result = runner.invoke(
        cli, ["--json", "--readonly", "policy", "update", "acct1", "--enabled"], env=ENV
    )
    assert result.exit_code == 2
    payload = json.loads(result.output.strip())
    assert payload["error"]["type"] == "write_not_allowed"
    assert route.call_count == 0


def test_not_found_maps_to_exit_code_4(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(f"{API}/accounts/acct1/devices/policy/missing").mock(
        return_value=Response(
            404, json={"success": False, "errors": [{"code": 1001, "message": "not found"}]}
        )
    )

    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "policy", "get", "acct1", "missing"], env=ENV)
    assert result.exit_code == 4
    payload = json.loads(result.output.strip())
    assert payload["error"]["type"] == "NotFoundError"
    assert payload["error"]["details"]["statusCode"] == 404


def test_missing_token_is_a_usage_error() -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli, ["--json", "policy", "ls", "acct1"], env={"DEVICEPOLICY_API_TOKEN": ""}
    )
    assert result.exit_code == 2
    payload = json.loads(result.output.strip())
    assert "DEVICEPOLICY_API_TOKEN" in payload["error"]["message"]


def test_certificates_set_and_get(respx_mock: respx.MockRouter) -> None:
    url = f"{API}/zones/zone1/devices/policy/certificates"
    patch = respx_mock.patch(url).mock(
        return_value=Response(200, json={"success": True, "result": {"enabled": True}})
    )
    respx_mock.get(url).mock(
        return_value=Response(200, json={"success": True, "result": {"enabled": True}})
    )

    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "certificates", "set", "zone1", "--enable"], env=ENV)
    assert result.exit_code == 0, result.output
    assert json.loads(patch.calls[0].request.content) == {"enabled": True}

    result = runner.invoke(cli, ["--json", "certificates", "get", "zone1"], env=ENV)
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output.strip())
    assert payload["data"]["certificates"] == {"zoneId": "zone1", "enabled": True}


def test_version_makes_no_network_calls() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "version"])
    assert result.exit_code == 0
    payload = json.loads(result.output.strip())
    assert "version" in payload["data"]


def test_table_output_renders_policies(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(f"{API}/accounts/acct1/devices/policies").mock(
        return_value=Response(
            200, json=_list_page([{"policy_id": "p1", "name": "Alpha"}], page=1, total_pages=1)
        )
    )

    runner = CliRunner()
    result = runner.invoke(cli, ["policy", "ls", "acct1"], env=ENV)
    assert result.exit_code == 0, result.output
    assert "Alpha" in result.output


def test_policy_create_rejects_empty_name_as_usage_error(respx_mock: respx.MockRouter) -> None:
    route = respx_mock.post(f"{API}/accounts/acct1/devices/policy")

    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "--json",
            "policy",
            "create",
            "acct1",
            "--name",
            "",
            "--match",
            "any",
            "--precedence",
            "1",
        ],
        env=ENV,
    )
    assert result.exit_code == 2, result.output
    payload = json.loads(result.output.strip())
    assert payload["error"]["type"] == "usage_error"
    assert payload["error"]["details"]["errors"][0]["field"] == "name"
    assert not route.called


def _single_empty_page(respx_mock: respx.MockRouter, account_id: str) -> respx.Route:
    return respx_mock.get(f"{API}/accounts/{account_id}/devices/policies").mock(
        return_value=Response(200, json=_list_page([], page=1, total_pages=1))
    )


def test_api_token_file_is_sent_as_bearer(
    respx_mock: respx.MockRouter, tmp_path: Path
) -> None:
    route = _single_empty_page(respx_mock, "acct1")
    token_file = tmp_path / "token"
    token_file.write_text("file-token\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        cli, ["--json", "--api-token-file", str(token_file), "policy", "ls", "acct1"], env=ENV
    )
    assert result.exit_code == 0, result.output
    assert route.calls[0].request.headers["authorization"] == "Bearer file-token"


def test_api_token_file_dash_reads_stdin(respx_mock: respx.MockRouter) -> None:
    route = _single_empty_page(respx_mock, "acct1")

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["--json", "--api-token-file", "-", "policy", "ls", "acct1"],
        input="stdin-token\n",
        env=ENV,
    )
    assert result.exit_code == 0, result.output
    assert route.calls[0].request.headers["authorization"] == "Bearer stdin-token"


def test_empty_api_token_file_is_a_usage_error(tmp_path: Path) -> None:
    token_file = tmp_path / "token"
    token_file.write_text("\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        cli, ["--json", "--api-token-file", str(token_file), "policy", "ls", "acct1"], env=ENV
    )
    assert result.exit_code == 2
    payload = json.loads(result.output.strip())
    assert payload["error"]["type"] == "usage_error"
    assert "Empty API token file" in payload["error"]["message"]


def test_very_verbose_logs_requests_to_stderr_with_token_masked(
    respx_mock: respx.MockRouter,
) -> None:
    # The account id embeds the token so the logged request path must be masked.
    _single_empty_page(respx_mock, "s3cr3t-acct")

    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["-vv", "policy", "ls", "s3cr3t-acct"],
        env={"DEVICEPOLICY_API_TOKEN": "s3cr3t", "COLUMNS": "200"},
    )
    assert result.exit_code == 0, result.output
    assert "DEBUG" in result.output
    assert "-> GET /accounts/***-acct/devices/policies" in result.output
    assert "<- 200 GET" in result.output
    assert "s3cr3t" not in result.output


def test_default_verbosity_does_not_log_requests(respx_mock: respx.MockRouter) -> None:
    _single_empty_page(respx_mock, "acct1")

    runner = CliRunner()
    result = runner.invoke(cli, ["policy", "ls", "acct1"], env=ENV)
    assert result.exit_code == 0, result.output
    assert "-> GET" not in result.output


def test_configure_logging_levels_and_restore() -> None:
    logger = logging.getLogger("devicepolicy")
    before = (logger.level, list(logger.handlers), logger.propagate)

    previous = configure_logging(verbosity=2)
    try:
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 1
    finally:
        restore_logging(previous)
    assert (logger.level, list(logger.handlers), logger.propagate) == before

    previous = configure_logging(verbosity=2, quiet=True)
    try:
        assert logger.level == logging.ERROR
    finally:
        restore_logging(previous)
