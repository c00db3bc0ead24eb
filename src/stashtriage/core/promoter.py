"""Promoting a stash to a permanent, named branch.

The stash is applied onto a placeholder branch, committed (git opens the
editor so the operator writes the message), and the branch is renamed after
the commit subject. Every mutation up to the rename is compensated, so a
conflicting apply, a failed commit, an unreadable or unusable message, or a
rename clash leaves the repository exactly as it was, stash included.
"""

import logging
from enum import Enum
from pathlib import Path

from stashtriage.core.branch_naming import (
    MissingCommitSubjectError,
    branch_name_for_subject,
    find_commit_subject,
)
from stashtriage.core.context import StashTriageContext
from stashtriage.core.gitops import GitOps, stash_ref
from stashtriage.core.output import emphasize_error, user_output
from stashtriage.core.transaction import Compensation, StepFailedError, Transaction

logger = logging.getLogger(__name__)

PROMOTION_DISABLED_ERROR = "ERROR - Can't commit branches with unstaged files!"


class PromotionOutcome(Enum):
    PROMOTED = "promoted"
    REJECTED = "rejected"
    ROLLED_BACK = "rolled_back"


def read_commit_subject(path: Path) -> str:
    """Read the subject line git recorded for the last commit.

    Raises:
        MissingCommitSubjectError: If the file is missing, unreadable, not UTF-8
            or has no subject line
    """
    try:
        with path.open(encoding="utf-8") as f:
            return find_commit_subject(f)
    except FileNotFoundError as e:
        raise MissingCommitSubjectError(f"Commit message file not found: {path}") from e
    except UnicodeDecodeError as e:
        raise MissingCommitSubjectError(f"Commit message in {path} is not valid UTF-8") from e
    except OSError as e:
        raise MissingCommitSubjectError(f"Could not read commit message {path}: {e}") from e


def _switch_back(git_ops: GitOps, cwd: Path, prior_ref: str, placeholder: str) -> Compensation:
    return Compensation(
        description=f"return to '{prior_ref}' and delete '{placeholder}'",
        actions=(
            lambda: git_ops.checkout(cwd, prior_ref),
            lambda: git_ops.delete_branch(cwd, placeholder),
        ),
    )


def _discard_applied_changes(git_ops: GitOps, cwd: Path) -> Compensation:
    # Unstaging first clears unmerged entries left by a conflicting apply
    return Compensation(
        description="discard applied stash changes",
        actions=(
            lambda: git_ops.reset_index(cwd),
            lambda: git_ops.discard_tracked_changes(cwd),
            lambda: git_ops.remove_untracked_files(cwd),
        ),
    )


def _unstage(git_ops: GitOps, cwd: Path) -> Compensation:
    return Compensation(
        description="unstage changes",
        actions=(lambda: git_ops.reset_index(cwd),),
    )


def promote_stash(
    ctx: StashTriageContext, position: int, *, promotion_allowed: bool
) -> PromotionOutcome:
    """Turn the stash at ``position`` into a branch and drop it.

    Args:
        ctx: Triage context
        position: Stash position under review
        promotion_allowed: Session-wide guard result; False rejects without mutating

    Returns:
        PROMOTED when the branch exists and the stash is gone, REJECTED when the
        guard disallowed promotion, ROLLED_BACK when a step failed and every
        mutation was undone

    Raises:
        GitTerminatedError: If git died abnormally; no rollback is attempted
    """
    if not promotion_allowed:
        user_output(emphasize_error(PROMOTION_DISABLED_ERROR))
        return PromotionOutcome.REJECTED

    git_ops = ctx.git_ops
    cwd = ctx.cwd
    ref = stash_ref(position)
    placeholder = ctx.config.placeholder_branch
    prior_ref = git_ops.get_current_ref(cwd)
    logger.debug("Promoting %s from %s via %s", ref, prior_ref, placeholder)

    txn = Transaction(
        f"promote {ref}",
        recoverable=(StepFailedError, MissingCommitSubjectError),
    )
    try:
        with txn:
            txn.step(
                f"create branch '{placeholder}'",
                lambda: git_ops.create_branch(cwd, placeholder),
                _switch_back(git_ops, cwd, prior_ref, placeholder),
            )
            txn.step(
                f"apply {ref}",
                lambda: git_ops.apply_stash(cwd, position),
                _discard_applied_changes(git_ops, cwd),
                undo_on_failure=True,
            )
            txn.step(
                "stage changes",
                lambda: git_ops.add_all(cwd),
                _unstage(git_ops, cwd),
                undo_on_failure=True,
            )
            txn.step("commit", lambda: git_ops.commit_no_verify(cwd))

            subject = read_commit_subject(git_ops.get_commit_message_path(cwd))
            branch = branch_name_for_subject(subject, ctx.config.branch_prefix)
            txn.step(
                f"rename branch to '{branch}'",
                lambda: git_ops.rename_current_branch(cwd, branch),
            )
            txn.commit()
    except (StepFailedError, MissingCommitSubjectError) as e:
        user_output(f"Promotion of {ref} abandoned: {e}")
        if txn.rollback_clean:
            user_output(f"Rolled back; {ref} is unchanged.")
        else:
            user_output(
                emphasize_error(f"Rollback incomplete; check the repository state. {ref} was kept.")
            )
        return PromotionOutcome.ROLLED_BACK

    checkout_result = git_ops.checkout(cwd, prior_ref)
    if not checkout_result.succeeded:
        user_output(
            emphasize_error(
                f"ERROR - Created '{branch}' but could not return to '{prior_ref}'; {ref} was kept."
            )
        )
        return PromotionOutcome.PROMOTED

    drop_result = git_ops.drop_stash(cwd, position)
    if not drop_result.succeeded:
        user_output(emphasize_error(f"ERROR - Created '{branch}' but could not drop {ref}."))
        return PromotionOutcome.PROMOTED

    user_output(f"Saved {ref} as branch '{branch}'.")
    return PromotionOutcome.PROMOTED
