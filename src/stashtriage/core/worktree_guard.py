"""Session-wide gate on branch promotion.

Promotion requires a clean working tree. The check runs once at session
start and its answer holds for the whole session.
"""

from pathlib import Path

from stashtriage.core.gitops import GitOps
from stashtriage.core.output import emphasize_error, user_output

LOCAL_CHANGES_WARNING = (
    "WARNING - Can't backup stashes as branches with local changes.\n"
    "Resolve local changes to backup stashes as branches."
)


def check_promotion_allowed(git_ops: GitOps, cwd: Path) -> bool:
    """Evaluate the guard once, warning the operator when promotion is disabled."""
    if git_ops.has_uncommitted_changes(cwd):
        user_output(emphasize_error(LOCAL_CHANGES_WARNING))
        return False
    return True
