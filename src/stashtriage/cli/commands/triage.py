import click

from stashtriage.core.context import NoRepoSentinel, StashTriageContext
from stashtriage.core.gitops import GitTerminatedError
from stashtriage.core.output import emphasize_error, user_output
from stashtriage.core.session import run_session


@click.command("triage")
@click.option(
    "--diff/--no-diff",
    "show_diff",
    default=None,
    help="Show each stash's diff while reviewing (default from config).",
)
@click.pass_obj
def triage_cmd(ctx: StashTriageContext, show_diff: bool | None) -> None:
    """Review stashes one at a time: drop, branch, skip, apply or quit."""
    if isinstance(ctx.repo_root, NoRepoSentinel):
        user_output(
            click.style("Error: ", fg="red")
            + "Not in a repository. This command requires a git repository."
        )
        raise SystemExit(1)

    try:
        run_session(ctx, show_diff=show_diff)
    except (GitTerminatedError, RuntimeError) as e:
        user_output(emphasize_error(f"Fatal: {e}"))
        raise SystemExit(1) from e
