"""Launching git, with the operation being attempted attached to failures.

Output is captured as text by default. Callers that need the terminal (the
commit editor, the diff pager) pass ``stdout=None``; ``subprocess.DEVNULL``
discards a stream.
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path

CAPTURE = subprocess.PIPE


def format_git_failure(
    cmd: Sequence[str], operation_context: str, completed: subprocess.CompletedProcess[str]
) -> str:
    """Describe a failed git command, including any captured output."""
    lines = [
        f"Failed to {operation_context}",
        f"Command: {' '.join(cmd)}",
        f"Exit code: {completed.returncode}",
    ]
    for stream_name, text in (("stdout", completed.stdout), ("stderr", completed.stderr)):
        if text and text.strip():
            lines.append(f"{stream_name}: {text.strip()}")
    return "\n".join(lines)


def run_git(
    args: Sequence[str],
    operation_context: str,
    cwd: Path,
    *,
    check: bool = True,
    stdout: int | None = CAPTURE,
    stderr: int | None = CAPTURE,
) -> subprocess.CompletedProcess[str]:
    """Run ``git <args>`` in ``cwd``.

    Args:
        args: git arguments, without the leading "git"
        operation_context: What the command is for, e.g. "drop stash stash@{0}"
        cwd: Repository directory
        check: Raise when git exits non-zero
        stdout: CAPTURE, None (inherit the terminal) or subprocess.DEVNULL
        stderr: Same choices as stdout

    Raises:
        RuntimeError: If git cannot be launched, or exits non-zero with check=True
    """
    cmd = ["git", *args]
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=stdout,
            stderr=stderr,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except FileNotFoundError as e:
        raise RuntimeError(f"git not found while trying to {operation_context}") from e
    except OSError as e:
        raise RuntimeError(f"Could not launch git while trying to {operation_context}: {e}") from e

    if check and completed.returncode != 0:
        raise RuntimeError(format_git_failure(cmd, operation_context, completed))
    return completed
