"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from stashtriage.core.gitops import GitOps, RealGitOps
from stashtriage.core.global_config import TriageConfig, load_global_config


class NoRepoSentinel:
    """Sentinel value indicating the CLI was invoked outside a git repository."""

    pass


@dataclass(frozen=True)
class StashTriageContext:
    """Immutable context holding all dependencies for triage operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.

    Note: repo_root is NoRepoSentinel when cwd is not inside a repository.
    Only the config commands may run in that state.
    """

    git_ops: GitOps
    cwd: Path  # Current working directory at CLI invocation
    repo_root: Path | NoRepoSentinel
    config: TriageConfig

    @staticmethod
    def for_test(
        git_ops: GitOps,
        cwd: Path,
        *,
        repo_root: Path | NoRepoSentinel | None = None,
        config: TriageConfig | None = None,
    ) -> "StashTriageContext":
        """Create a context for tests; repo_root defaults to cwd and config to defaults."""
        return StashTriageContext(
            git_ops=git_ops,
            cwd=cwd,
            repo_root=repo_root if repo_root is not None else cwd,
            config=config if config is not None else TriageConfig(),
        )


def create_context() -> StashTriageContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Raises:
        ValueError: If the config file holds malformed values
    """
    cwd = Path.cwd()
    git_ops: GitOps = RealGitOps()
    repo_root = git_ops.get_repository_root(cwd)

    return StashTriageContext(
        git_ops=git_ops,
        cwd=cwd,
        repo_root=repo_root if repo_root is not None else NoRepoSentinel(),
        config=load_global_config(),
    )
