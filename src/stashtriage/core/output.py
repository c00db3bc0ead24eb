"""Operator feedback: stderr diagnostics, stdout output and emphasis styles.

user_output is for diagnostics the operator reads (warnings, errors, help);
it goes to stderr so that the stash diffs and prompts on stdout stay clean.
The style helpers wrap click.style, which resets styling at the end of
every segment and is stripped automatically when not writing to a tty.
"""

from typing import Any

import click


def user_output(message: Any | None = None, nl: bool = True) -> None:
    """Write a diagnostic message for the operator to stderr."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any | None = None, nl: bool = True) -> None:
    """Write regular program output to stdout."""
    click.echo(message, nl=nl)


def emphasize_error(message: str) -> str:
    """Bold red, used for errors, warnings and help."""
    return click.style(message, fg="red", bold=True)


def emphasize_prompt(message: str) -> str:
    """Bold blue, used for interactive prompts."""
    return click.style(message, fg="blue", bold=True)
