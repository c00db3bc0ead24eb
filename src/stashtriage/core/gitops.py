"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
triage session testable without a real repository.

Architecture:
- GitResult: Outcome of a single git invocation (exit code or terminating signal)
- GitOps: Abstract base class defining the interface
- RealGitOps: Production implementation using subprocess
"""

import logging
import signal
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from stashtriage.core.git_process import run_git

logger = logging.getLogger(__name__)

# git exits with 128 + SIGPIPE when its pager is closed before the diff ends
BROKEN_PIPE_EXIT_CODE = 141


def stash_ref(index: int) -> str:
    """Return the positional reference for the stash at ``index``."""
    return f"stash@{{{index}}}"


@dataclass(frozen=True)
class GitResult:
    """Outcome of a git invocation.

    Exactly one of ``exit_code`` and ``signal`` is set. A process killed by a
    signal has no exit code; callers must not read that as success or failure.
    """

    args: tuple[str, ...]
    exit_code: int | None
    signal: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def terminated(self) -> bool:
        """True if the process died without reporting an exit code."""
        return self.exit_code is None

    @property
    def broken_pipe(self) -> bool:
        """True if git stopped because its output pipe was closed early."""
        return self.exit_code == BROKEN_PIPE_EXIT_CODE or self.signal == signal.SIGPIPE

    @staticmethod
    def from_returncode(args: Sequence[str], returncode: int) -> "GitResult":
        """Build a result from a subprocess return code (negative means signal death)."""
        if returncode < 0:
            return GitResult(args=tuple(args), exit_code=None, signal=-returncode)
        return GitResult(args=tuple(args), exit_code=returncode)


class GitTerminatedError(RuntimeError):
    """Raised when git was terminated abnormally and reported no exit code.

    The repository state is no longer trustworthy once this happens, so it is
    never handled below the CLI boundary.
    """

    def __init__(self, result: GitResult) -> None:
        self.result = result
        cmd_str = " ".join(result.args)
        super().__init__(f"git terminated abnormally (signal {result.signal})\nCommand: {cmd_str}")


def ensure_exit_code(result: GitResult) -> GitResult:
    """Return ``result`` unchanged, or raise if the process reported no exit code."""
    if result.terminated:
        raise GitTerminatedError(result)
    return result


# ============================================================================
# Abstract Interface
# ============================================================================


class GitOps(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.

    Mutating operations return a GitResult whose exit code is always present;
    abnormal termination is raised as GitTerminatedError instead. show_stash is
    the one exception: it returns the raw result so the caller can classify it.
    """

    # Read-only queries

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the repository containing cwd.

        Returns:
            Repository root, or None if cwd is not inside a git repository
        """
        ...

    @abstractmethod
    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check if the working tree has any local modifications.

        Uses git status --porcelain; any output (staged, modified, or
        untracked entries) counts as a change.
        """
        ...

    @abstractmethod
    def get_current_ref(self, cwd: Path) -> str:
        """Get the checked-out branch name, or the HEAD commit SHA when detached."""
        ...

    @abstractmethod
    def get_commit_message_path(self, cwd: Path) -> Path:
        """Get the path of the file git writes the last commit message to."""
        ...

    # Stash operations

    @abstractmethod
    def show_stash(self, cwd: Path, index: int, *, page: bool) -> GitResult:
        """Display the diff of the stash at ``index``.

        Args:
            cwd: Repository working directory
            index: Stash position (0 = most recent)
            page: True to send the diff to the terminal, False to discard it

        Returns:
            The raw result, including abnormal termination
        """
        ...

    @abstractmethod
    def stash_looks_applied(self, cwd: Path, index: int, check_command: str) -> bool:
        """Ask whether the stash at ``index`` already appears in the working tree.

        Runs ``git <check_command> stash@{index}``. A missing or failing
        check command means "not applied".
        """
        ...

    @abstractmethod
    def apply_stash(self, cwd: Path, index: int) -> GitResult:
        """Apply the stash at ``index`` to the working tree."""
        ...

    @abstractmethod
    def drop_stash(self, cwd: Path, index: int) -> GitResult:
        """Remove the stash at ``index``; later stashes shift down by one."""
        ...

    # Branch operations

    @abstractmethod
    def create_branch(self, cwd: Path, branch: str) -> GitResult:
        """Create ``branch`` at HEAD and switch to it."""
        ...

    @abstractmethod
    def checkout(self, cwd: Path, ref: str) -> GitResult:
        """Switch to an existing branch or commit."""
        ...

    @abstractmethod
    def rename_current_branch(self, cwd: Path, new_name: str) -> GitResult:
        """Rename the checked-out branch."""
        ...

    @abstractmethod
    def delete_branch(self, cwd: Path, branch: str) -> GitResult:
        """Delete ``branch`` even if it holds unmerged commits."""
        ...

    # Index and working tree

    @abstractmethod
    def add_all(self, cwd: Path) -> GitResult:
        """Stage every working-tree change, including untracked files."""
        ...

    @abstractmethod
    def commit_no_verify(self, cwd: Path) -> GitResult:
        """Commit the index without running hooks; git opens the editor for the message."""
        ...

    @abstractmethod
    def reset_index(self, cwd: Path) -> GitResult:
        """Unstage everything, leaving the working tree untouched."""
        ...

    @abstractmethod
    def discard_tracked_changes(self, cwd: Path) -> GitResult:
        """Restore tracked files to their state in the index."""
        ...

    @abstractmethod
    def remove_untracked_files(self, cwd: Path) -> GitResult:
        """Delete untracked (non-ignored) files."""
        ...


# ============================================================================
# Production Implementation
# ============================================================================


class RealGitOps(GitOps):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def _run(self, cwd: Path, args: list[str], operation_context: str) -> GitResult:
        """Run a git command attached to the terminal and raise on abnormal termination."""
        return ensure_exit_code(self._run_raw(cwd, args, operation_context))

    def _run_raw(
        self,
        cwd: Path,
        args: list[str],
        operation_context: str,
        *,
        stdout: int | None = None,
        stderr: int | None = None,
    ) -> GitResult:
        logger.debug("Running git %s (cwd=%s)", " ".join(args), cwd)
        completed = run_git(
            args, operation_context, cwd, check=False, stdout=stdout, stderr=stderr
        )
        result = GitResult.from_returncode(["git", *args], completed.returncode)
        logger.debug("Result exit_code=%s signal=%s", result.exit_code, result.signal)
        return result

    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the repository containing cwd."""
        result = run_git(
            ["rev-parse", "--show-toplevel"], "find repository root", cwd, check=False
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check if the working tree has any local modifications."""
        result = run_git(["status", "--porcelain"], "check working tree status", cwd)
        return bool(result.stdout.strip())

    def get_current_ref(self, cwd: Path) -> str:
        """Get the checked-out branch name, or the HEAD commit SHA when detached."""
        result = run_git(["rev-parse", "--abbrev-ref", "HEAD"], "get current branch", cwd)
        branch = result.stdout.strip()
        if branch != "HEAD":
            return branch

        result = run_git(["rev-parse", "HEAD"], "get HEAD commit", cwd)
        return result.stdout.strip()

    def get_commit_message_path(self, cwd: Path) -> Path:
        """Get the path of the file git writes the last commit message to."""
        result = run_git(
            ["rev-parse", "--git-path", "COMMIT_EDITMSG"], "locate commit message file", cwd
        )
        path = Path(result.stdout.strip())
        # --git-path answers relative to cwd unless the git dir is elsewhere
        if not path.is_absolute():
            path = cwd / path
        return path

    def show_stash(self, cwd: Path, index: int, *, page: bool) -> GitResult:
        """Display the diff of the stash at ``index``."""
        return self._run_raw(
            cwd,
            ["stash", "show", "-p", stash_ref(index)],
            operation_context=f"show stash {stash_ref(index)}",
            stdout=None if page else subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    def stash_looks_applied(self, cwd: Path, index: int, check_command: str) -> bool:
        """Ask whether the stash at ``index`` already appears in the working tree."""
        ref = stash_ref(index)
        logger.debug("Running git %s %s (cwd=%s)", check_command, ref, cwd)
        completed = run_git(
            [check_command, ref], f"check whether {ref} is applied", cwd, check=False
        )
        cmd = ["git", check_command, ref]
        result = ensure_exit_code(GitResult.from_returncode(cmd, completed.returncode))
        return result.succeeded

    def apply_stash(self, cwd: Path, index: int) -> GitResult:
        """Apply the stash at ``index`` to the working tree."""
        ref = stash_ref(index)
        return self._run(cwd, ["stash", "apply", ref], f"apply stash {ref}")

    def drop_stash(self, cwd: Path, index: int) -> GitResult:
        """Remove the stash at ``index``."""
        ref = stash_ref(index)
        return self._run(cwd, ["stash", "drop", ref], f"drop stash {ref}")

    def create_branch(self, cwd: Path, branch: str) -> GitResult:
        """Create ``branch`` at HEAD and switch to it."""
        return self._run(cwd, ["checkout", "-b", branch], f"create branch '{branch}'")

    def checkout(self, cwd: Path, ref: str) -> GitResult:
        """Switch to an existing branch or commit."""
        return self._run(cwd, ["checkout", ref], f"checkout '{ref}'")

    def rename_current_branch(self, cwd: Path, new_name: str) -> GitResult:
        """Rename the checked-out branch."""
        return self._run(cwd, ["branch", "-m", new_name], f"rename branch to '{new_name}'")

    def delete_branch(self, cwd: Path, branch: str) -> GitResult:
        """Delete ``branch`` even if it holds unmerged commits."""
        return self._run(cwd, ["branch", "-D", branch], f"delete branch '{branch}'")

    def add_all(self, cwd: Path) -> GitResult:
        """Stage every working-tree change, including untracked files."""
        return self._run(cwd, ["add", "-A", "."], "stage changes")

    def commit_no_verify(self, cwd: Path) -> GitResult:
        """Commit the index without running hooks."""
        return self._run(cwd, ["commit", "--no-verify"], "commit staged changes")

    def reset_index(self, cwd: Path) -> GitResult:
        """Unstage everything, leaving the working tree untouched."""
        return self._run(cwd, ["reset", "HEAD"], "unstage changes")

    def discard_tracked_changes(self, cwd: Path) -> GitResult:
        """Restore tracked files to their state in the index."""
        return self._run(cwd, ["checkout", "--", "."], "discard tracked changes")

    def remove_untracked_files(self, cwd: Path) -> GitResult:
        """Delete untracked (non-ignored) files."""
        return self._run(cwd, ["clean", "-f", "-d"], "remove untracked files")
