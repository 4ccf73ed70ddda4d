from __future__ import annotations

from devicepolicy.types import ZoneId

from ..click_compat import RichCommand, RichGroup, click
from ..context import CLIContext
from ..errors import CLIError
from ..options import output_options
from ..runner import CommandOutput, run_command


@click.group(name="certificates", cls=RichGroup)
def certificates_group() -> None:
    """Zone device client certificate provisioning."""


@certificates_group.command(name="get", cls=RichCommand)
@click.argument("zone_id", type=str)
@output_options
@click.pass_obj
def certificates_get(ctx: CLIContext, zone_id: str) -> None:
    """Show whether a zone provisions device client certificates."""

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        setting = ctx.get_client().certificates.get(ZoneId(zone_id))
        return CommandOutput(
            data={"certificates": {"zoneId": zone_id, "enabled": setting.enabled}},
        )

    run_command(ctx, command="certificates get", fn=fn)


@certificates_group.command(name="set", cls=RichCommand)
@click.argument("zone_id", type=str)
@click.option(
    "--enable/--disable",
    "enabled",
    default=None,
    help="Turn client certificate provisioning on or off.",
)
@output_options
@click.pass_obj
def certificates_set(ctx: CLIContext, zone_id: str, enabled: bool | None) -> None:
    """
    Enable or disable client certificate provisioning for a zone.

    Examples:
    - `devicepolicy certificates set <zone-id> --enable`
    """

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        if enabled is None:
            raise CLIError(
                "Pass --enable or --disable.", exit_code=2, error_type="usage_error"
            )
        setting = ctx.get_client().certificates.update(ZoneId(zone_id), enabled)
        return CommandOutput(
            data={"certificates": {"zoneId": zone_id, "enabled": setting.enabled}},
        )

    run_command(ctx, command="certificates set", fn=fn)
