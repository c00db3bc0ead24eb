import logging
import os

import click

from stashtriage.cli.commands.config import config_group
from stashtriage.cli.commands.triage import triage_cmd
from stashtriage.core.context import create_context
from stashtriage.core.output import user_output

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV_VAR = "STASHTRIAGE_DEBUG"


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.version_option(package_name="stashtriage")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Triage git stashes one at a time.

    Run without a subcommand to start reviewing stashes.
    """
    # Enable debug logging if STASHTRIAGE_DEBUG environment variable is set
    if os.getenv(DEBUG_ENV_VAR):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context()
        except (ValueError, RuntimeError) as e:
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from e

    if ctx.invoked_subcommand is None:
        ctx.invoke(triage_cmd)


cli.add_command(triage_cmd)
cli.add_command(config_group)


def main() -> None:
    """CLI entry point used by the `stashtriage` console script."""
    cli()
