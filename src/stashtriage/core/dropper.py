"""Discarding a stash, with a safety prompt for unreconciled entries."""

import logging
from enum import Enum

import click

from stashtriage.core.context import StashTriageContext
from stashtriage.core.gitops import stash_ref
from stashtriage.core.output import emphasize_error, user_output

logger = logging.getLogger(__name__)


class DropOutcome(Enum):
    DROPPED = "dropped"
    DECLINED = "declined"
    FAILED = "failed"


DROP_PROMPT = "Stash may not be applied. Drop anyway? [y/N]"


def confirm_unapplied_drop() -> bool:
    """Ask before dropping a stash that may hold unsaved work.

    Only "y" consents. Any other answer declines without asking again, as do
    empty input, end of input and interrupts.
    """
    try:
        answer = click.prompt(DROP_PROMPT, default="", show_default=False, prompt_suffix=" ")
    except click.Abort:
        click.echo()
        return False
    return answer.strip() == "y"


def drop_stash(ctx: StashTriageContext, position: int) -> DropOutcome:
    """Drop the stash at ``position``.

    The stash below it takes over ``position`` afterwards, so the caller must
    keep its cursor where it is.
    """
    ref = stash_ref(position)
    applied = ctx.git_ops.stash_looks_applied(ctx.cwd, position, ctx.config.applied_check)
    logger.debug("%s looks applied: %s", ref, applied)

    if not applied and not confirm_unapplied_drop():
        return DropOutcome.DECLINED

    result = ctx.git_ops.drop_stash(ctx.cwd, position)
    if not result.succeeded:
        user_output(
            emphasize_error(f"ERROR - Failed to drop {ref} (exit code {result.exit_code}).")
        )
        return DropOutcome.FAILED

    return DropOutcome.DROPPED
