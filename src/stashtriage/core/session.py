"""The interactive review loop over the stash stack.

States are Reviewing(position) and Done. Each pass shows the stash at the
cursor, reads one action and dispatches it:

    d  drop the stash; the next stash slides into this position
    b  promote the stash to a branch; on success the next stash slides in
    s  leave the stash and move to the next position
    a  apply the stash and finish
    q  finish (end of input and Ctrl-C count as q)
    ?  show help (so does an empty answer)

Anything else is ignored and the same stash is shown again.
"""

import logging

import click

from stashtriage.core.context import StashTriageContext
from stashtriage.core.dropper import drop_stash
from stashtriage.core.output import (
    emphasize_error,
    emphasize_prompt,
    machine_output,
    user_output,
)
from stashtriage.core.promoter import PromotionOutcome, promote_stash
from stashtriage.core.stash_cursor import StashCursor, stash_exists_at
from stashtriage.core.worktree_guard import check_promotion_allowed

logger = logging.getLogger(__name__)

ACTION_PROMPT = "Action on this stash [d,b,s,a,q,?]? "

HELP_TEXT = (
    "d - drop this stash\n"
    "b - commit this stash to a separate branch and delete it\n"
    "s - take no action on this stash\n"
    "a - apply; apply the stash and take no further action\n"
    "q - quit; take no further action on remaining stashes\n"
    "? - print help"
)

NO_STASHES_MESSAGE = "No stashes found."


def read_action() -> str | None:
    """Read one action from the operator, or None at end of input."""
    try:
        answer = click.prompt(
            emphasize_prompt(ACTION_PROMPT),
            default="",
            show_default=False,
            prompt_suffix="",
        )
    except click.Abort:
        # Leave the terminal on a fresh line
        machine_output()
        return None
    return answer.strip()


def confirm_skip_after_failed_promotion() -> bool:
    """Offer to move past a stash whose promotion was rolled back."""
    try:
        return click.confirm("Skip this stash?", default=True)
    except click.Abort:
        machine_output()
        return False


class TriageSession:
    """One walk over the stash stack, from the most recent stash down."""

    def __init__(self, ctx: StashTriageContext, *, show_diff: bool | None = None) -> None:
        self.ctx = ctx
        self.cursor = StashCursor()
        self.show_diff = ctx.config.show_diff if show_diff is None else show_diff
        self.promotion_allowed = False
        self.found_any = False
        self.done = False

    def run(self) -> None:
        """Review stashes until none remain or the operator stops.

        Raises:
            GitTerminatedError: If git dies abnormally during any action
            RuntimeError: If git cannot be launched
        """
        self.promotion_allowed = check_promotion_allowed(self.ctx.git_ops, self.ctx.cwd)

        while not self.done:
            if not stash_exists_at(
                self.ctx.git_ops, self.ctx.cwd, self.cursor.position, show_diff=self.show_diff
            ):
                if not self.found_any:
                    machine_output(NO_STASHES_MESSAGE)
                logger.debug("No stash at %s; session done", self.cursor.ref)
                break

            self.found_any = True
            self.dispatch(read_action())

    def dispatch(self, action: str | None) -> None:
        """Apply one operator action to the stash under the cursor."""
        position = self.cursor.position
        logger.debug("Action %r on %s", action, self.cursor.ref)

        match action:
            case None | "q":
                self.done = True
            case "d":
                drop_stash(self.ctx, position)
            case "b":
                outcome = promote_stash(
                    self.ctx, position, promotion_allowed=self.promotion_allowed
                )
                rolled_back = outcome is PromotionOutcome.ROLLED_BACK
                if rolled_back and confirm_skip_after_failed_promotion():
                    self.cursor.advance()
            case "s":
                self.cursor.advance()
            case "a":
                self.apply_and_finish(position)
            case "?" | "":
                machine_output(emphasize_error(HELP_TEXT))
            case _:
                pass

    def apply_and_finish(self, position: int) -> None:
        result = self.ctx.git_ops.apply_stash(self.ctx.cwd, position)
        if not result.succeeded:
            user_output(
                emphasize_error(
                    f"ERROR - Failed to apply {self.cursor.ref} (exit code {result.exit_code})."
                )
            )
        self.done = True


def run_session(ctx: StashTriageContext, *, show_diff: bool | None = None) -> None:
    """Run a full triage session in the context's working directory."""
    TriageSession(ctx, show_diff=show_diff).run()
