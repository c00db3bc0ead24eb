"""Positional cursor over git's stash stack.

Stashes have no stable identity: ``stash@{N}`` names whatever entry sits at
position N right now. Dropping the entry at N shifts every later entry down
by one, so after a removal the cursor stays put and the same position names
the next stash. Only actions that leave the reviewed entry in place move the
cursor forward.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from stashtriage.core.gitops import GitOps, GitResult, stash_ref

logger = logging.getLogger(__name__)


@dataclass
class StashCursor:
    """The stash position currently under review (0 = most recent stash)."""

    position: int = 0

    @property
    def ref(self) -> str:
        return stash_ref(self.position)

    def advance(self) -> None:
        """Move past a stash that stays in the stack."""
        self.position += 1
        logger.debug("Cursor advanced to %s", self.ref)


def classify_inspection(result: GitResult) -> bool:
    """Decide whether an inspection result means a stash exists.

    A clean exit and a closed output pipe (the operator quit the pager early)
    both mean the stash was there to show. Any other exit code, or any other
    abnormal termination, marks the end of the stack.
    """
    if result.broken_pipe:
        return True
    return result.succeeded


def stash_exists_at(git_ops: GitOps, cwd: Path, position: int, *, show_diff: bool) -> bool:
    """Inspect the stash at ``position`` and report whether it exists.

    With ``show_diff`` the stash's diff is shown to the operator as a side
    effect, which is how each entry is presented for review.
    """
    result = git_ops.show_stash(cwd, position, page=show_diff)
    exists = classify_inspection(result)
    logger.debug(
        "Inspected %s: exit_code=%s signal=%s exists=%s",
        stash_ref(position),
        result.exit_code,
        result.signal,
        exists,
    )
    return exists
