"""Ordered git mutations with compensating rollback.

A Transaction runs forward steps one at a time. Each step may register a
Compensation that undoes it. Normally the compensation is registered once the
step succeeds. A step that can fail partway and leave changes behind (a
conflicting `git stash apply` writes conflict markers and unmerged index
entries) registers it before running instead. If a step fails, or the block
raises one of the recoverable exception types, the registered compensations
run newest-first.

Fatal errors (anything not listed as recoverable, e.g. GitTerminatedError)
propagate without compensation: once git has died abnormally the repository
state is unknown and further mutations would only compound the damage.

Usage:
    with Transaction("promote stash@{0}") as txn:
        txn.step("create branch", lambda: git.create_branch(cwd, name),
                 Compensation("delete branch", (lambda: git.delete_branch(cwd, name),)))
        ...
        txn.commit()
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType

from stashtriage.core.gitops import GitResult
from stashtriage.core.output import emphasize_error, user_output

logger = logging.getLogger(__name__)

GitAction = Callable[[], GitResult]


class StepFailedError(Exception):
    """Raised when a forward step of a transaction did not succeed."""

    def __init__(self, description: str, result: GitResult) -> None:
        self.description = description
        self.result = result
        super().__init__(f"{description} failed (exit code {result.exit_code})")


@dataclass(frozen=True)
class Compensation:
    """Inverse of one forward step, as git actions run in order."""

    description: str
    actions: tuple[GitAction, ...]


class Transaction:
    """Scoped sequence of forward steps with reverse-order compensation."""

    def __init__(
        self,
        name: str,
        *,
        recoverable: tuple[type[BaseException], ...] = (StepFailedError,),
    ) -> None:
        self.name = name
        self._recoverable = recoverable
        self._compensations: list[Compensation] = []
        self._committed = False
        self.rolled_back = False
        self.rollback_clean = True

    def __enter__(self) -> "Transaction":
        logger.debug("Begin transaction: %s", self.name)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc_type is None:
            if not self._committed:
                logger.debug("Transaction %s left without commit", self.name)
                self.rollback()
            return False

        if issubclass(exc_type, self._recoverable):
            logger.debug("Transaction %s failed: %s", self.name, exc)
            self.rollback()
            return False

        logger.debug("Transaction %s aborted by fatal error: %s", self.name, exc)
        return False

    def step(
        self,
        description: str,
        action: GitAction,
        compensation: Compensation | None = None,
        *,
        undo_on_failure: bool = False,
    ) -> GitResult:
        """Run a forward action and register its compensation.

        Args:
            description: What the step does, for messages
            action: The git action to run
            compensation: Undoes the action
            undo_on_failure: Register the compensation before running the action, so
                it also runs when the action fails after changing the repository

        Raises:
            StepFailedError: If the action's result did not succeed
        """
        logger.debug("Step: %s", description)
        if compensation is not None and undo_on_failure:
            self._compensations.append(compensation)
        result = action()
        if not result.succeeded:
            raise StepFailedError(description, result)
        if compensation is not None and not undo_on_failure:
            self._compensations.append(compensation)
        return result

    def commit(self) -> None:
        """Mark the transaction complete; registered compensations are discarded."""
        logger.debug("Commit transaction: %s", self.name)
        self._committed = True
        self._compensations.clear()

    def rollback(self) -> None:
        """Run registered compensations newest-first.

        A failing compensation is reported and the remaining ones still run.
        rollback_clean records whether every compensation succeeded.
        """
        self.rolled_back = True
        while self._compensations:
            compensation = self._compensations.pop()
            logger.debug("Compensate: %s", compensation.description)
            for action in compensation.actions:
                result = action()
                if not result.succeeded:
                    self.rollback_clean = False
                    user_output(
                        emphasize_error(
                            f"Rollback step failed while trying to {compensation.description}: "
                            f"{' '.join(result.args)} (exit code {result.exit_code})"
                        )
                    )
