from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import ValidationError

from devicepolicy.models.entities import Policy, PolicyCreate, PolicyUpdate, ServiceModeV2
from devicepolicy.models.pagination import ListParams, ResultInfo
from devicepolicy.types import AccountId, PolicyId, ServiceMode

from ..click_compat import RichCommand, RichGroup, click
from ..context import CLIContext
from ..errors import CLIError
from ..options import output_options
from ..runner import CommandOutput, run_command

F = TypeVar("F", bound=Callable[..., object])

_SERVICE_MODES = [m.value for m in ServiceMode]

_TOGGLES: list[tuple[str, str, str]] = [
    ("enabled", "--enabled/--disabled", "Enable or disable the policy."),
    (
        "exclude_office_ips",
        "--exclude-office-ips/--no-exclude-office-ips",
        "Exclude office IPs from the WARP tunnel.",
    ),
    (
        "allow_mode_switch",
        "--allow-mode-switch/--no-allow-mode-switch",
        "Let users switch between Gateway and WARP modes.",
    ),
    ("switch_locked", "--switch-locked/--no-switch-locked", "Lock the WARP switch."),
    ("allow_updates", "--allow-updates/--no-allow-updates", "Let users update the client."),
    (
        "allowed_to_leave",
        "--allowed-to-leave/--no-allowed-to-leave",
        "Let users leave the organization.",
    ),
    (
        "disable_auto_fallback",
        "--disable-auto-fallback/--no-disable-auto-fallback",
        "Disable automatic fallback for captive portals.",
    ),
]


@click.group(name="policy", cls=RichGroup)
def policy_group() -> None:
    """Device settings policy commands."""


def _policy_row(policy: Policy) -> dict[str, Any]:
    return {
        "policyId": policy.policy_id,
        "name": policy.name,
        "precedence": policy.precedence,
        "enabled": policy.enabled,
        "default": policy.default,
        "match": policy.match,
    }


def _result_info_dict(info: ResultInfo) -> dict[str, Any]:
    return {
        "page": info.page,
        "perPage": info.per_page,
        "count": info.count,
        "totalCount": info.total_count,
        "totalPages": info.total_pages,
    }


def policy_field_options(fn: F) -> F:
    """Options shared by `create` and `update`; each defaults to "not set"."""
    for name, decl, help_text in reversed(_TOGGLES):
        fn = click.option(decl, name, default=None, help=help_text)(fn)
    fn = click.option(
        "--service-mode-port", type=int, default=None, help="Proxy port (proxy mode)."
    )(fn)
    fn = click.option(
        "--service-mode", type=click.Choice(_SERVICE_MODES), default=None, help="Service mode."
    )(fn)
    fn = click.option(
        "--captive-portal", type=int, default=None, help="Captive portal timeout (s)."
    )(fn)
    fn = click.option(
        "--auto-connect", type=int, default=None, help="Auto-connect timeout (s)."
    )(fn)
    fn = click.option(
        "--support-url", type=str, default=None, help="Support URL shown to users."
    )(fn)
    fn = click.option("--description", type=str, default=None, help="Policy description.")(fn)
    fn = click.option("--precedence", type=int, default=None, help="Policy precedence.")(fn)
    fn = click.option("--match", type=str, default=None, help="Device match expression.")(fn)
    fn = click.option("--name", type=str, default=None, help="Policy name.")(fn)
    return fn


def _update_fields(options: dict[str, Any]) -> dict[str, Any]:
    """Keep only the options the user actually passed."""
    fields = {k: v for k, v in options.items() if v is not None}
    mode = fields.pop("service_mode", None)
    port = fields.pop("service_mode_port", None)
    if port is not None and mode is None:
        raise CLIError(
            "--service-mode-port requires --service-mode.", exit_code=2, error_type="usage_error"
        )
    if mode is not None:
        service_mode: dict[str, Any] = {"mode": ServiceMode(mode)}
        if port is not None:
            service_mode["port"] = port
        fields["service_mode_v2"] = ServiceModeV2(**service_mode)
    return fields


M = TypeVar("M", PolicyCreate, PolicyUpdate)


def _build_payload(model: type[M], fields: dict[str, Any]) -> M:
    try:
        return model(**fields)
    except ValidationError as exc:
        problems = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        fields_text = ", ".join(p["field"] for p in problems)
        raise CLIError(
            f"Invalid value for {fields_text}.",
            exit_code=2,
            error_type="usage_error",
            details={"errors": problems},
        ) from None


@policy_group.command(name="ls", cls=RichCommand)
@click.argument("account_id", type=str)
@click.option("--page", type=int, default=None, help="Fetch only this page (1-based).")
@click.option("--per-page", type=int, default=None, help="Fetch only one page of this size.")
@output_options
@click.pass_obj
def policy_ls(
    ctx: CLIContext,
    account_id: str,
    *,
    page: int | None,
    per_page: int | None,
) -> None:
    """
    List device settings policies.

    Without --page/--per-page every page is fetched.

    Examples:
    - `devicepolicy policy ls <account-id>`
    - `devicepolicy policy ls <account-id> --page 2 --per-page 50`
    """

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        params = ListParams(page=page, per_page=per_page)
        result = ctx.get_client().policies.list(AccountId(account_id), params)
        return CommandOutput(
            data={"policies": [_policy_row(p) for p in result.data]},
            pagination={
                "autoPaginated": params.auto_paginate,
                "resultInfo": _result_info_dict(result.result_info),
            },
        )

    run_command(ctx, command="policy ls", fn=fn)


@policy_group.command(name="get", cls=RichCommand)
@click.argument("account_id", type=str)
@click.argument("policy_id", type=str, required=False)
@output_options
@click.pass_obj
def policy_get(ctx: CLIContext, account_id: str, policy_id: str | None) -> None:
    """Get a policy by id, or the default policy when no id is given."""

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        policies = ctx.get_client().policies
        if policy_id is None:
            policy = policies.get_default(AccountId(account_id))
        else:
            policy = policies.get(AccountId(account_id), PolicyId(policy_id))
        return CommandOutput(
            data={"policy": policy.to_payload()},
            resolved={"policy": {"default": policy_id is None, "policyId": policy.policy_id}},
        )

    run_command(ctx, command="policy get", fn=fn)


@policy_group.command(name="create", cls=RichCommand)
@click.argument("account_id", type=str)
@policy_field_options
@output_options
@click.pass_obj
def policy_create(ctx: CLIContext, account_id: str, **options: Any) -> None:
    """
    Create a custom policy.

    Examples:
    - `devicepolicy policy create <account-id> --name Contractors
      --match 'identity.email == "a@b.c"' --precedence 10`
    """

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        fields = _update_fields(options)
        missing = [f"--{k}" for k in ("name", "match", "precedence") if k not in fields]
        if missing:
            raise CLIError(
                f"Missing required option(s): {', '.join(missing)}.",
                exit_code=2,
                error_type="usage_error",
            )
        data = _build_payload(PolicyCreate, fields)
        created = ctx.get_client().policies.create(AccountId(account_id), data)
        return CommandOutput(data={"policy": created.to_payload()})

    run_command(ctx, command="policy create", fn=fn)


@policy_group.command(name="update", cls=RichCommand)
@click.argument("account_id", type=str)
@click.argument("policy_id", type=str, required=False)
@policy_field_options
@output_options
@click.pass_obj
def policy_update(
    ctx: CLIContext, account_id: str, policy_id: str | None, **options: Any
) -> None:
    """
    Update a policy; only the options passed are sent.

    Without POLICY_ID the account's default policy is updated.

    Examples:
    - `devicepolicy policy update <account-id> <policy-id> --disabled`
    - `devicepolicy policy update <account-id> --support-url https://help.example.com`
    """

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        fields = _update_fields(options)
        if not fields:
            raise CLIError(
                "Nothing to update; pass at least one field option.",
                exit_code=2,
                error_type="usage_error",
            )
        data = _build_payload(PolicyUpdate, fields)
        policies = ctx.get_client().policies
        if policy_id is None:
            updated = policies.update_default(AccountId(account_id), data)
        else:
            updated = policies.update(AccountId(account_id), PolicyId(policy_id), data)
        return CommandOutput(data={"policy": updated.to_payload()})

    run_command(ctx, command="policy update", fn=fn)


@policy_group.command(name="delete", cls=RichCommand)
@click.argument("account_id", type=str)
@click.argument("policy_id", type=str)
@click.option("--yes", "-y", is_flag=True, help="Confirm deletion.")
@output_options
@click.pass_obj
def policy_delete(ctx: CLIContext, account_id: str, policy_id: str, yes: bool) -> None:
    """Delete a custom policy and show the policies left on the account."""

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        if not yes:
            raise CLIError(
                "Refusing to delete without --yes.",
                exit_code=2,
                error_type="usage_error",
                hint=f"Re-run with: devicepolicy policy delete {account_id} {policy_id} --yes",
            )
        remaining = ctx.get_client().policies.delete(AccountId(account_id), PolicyId(policy_id))
        return CommandOutput(
            data={"deleted": policy_id, "policies": [_policy_row(p) for p in remaining]},
        )

    run_command(ctx, command="policy delete", fn=fn)
