"""Tests for launching git with operation context on failure."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from stashtriage.core.git_process import CAPTURE, format_git_failure, run_git

RUN = "stashtriage.core.git_process.subprocess.run"


def _completed(returncode: int, stdout: str = "", stderr: str = "") -> Mock:
    result = Mock(spec=subprocess.CompletedProcess)
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


def test_success_returns_completed_process() -> None:
    """Test that a zero exit returns the CompletedProcess with captured text."""
    completed = _completed(0, stdout="stash@{0}: WIP on main\n")
    with patch(RUN, return_value=completed) as mock_run:
        result = run_git(["stash", "list"], "list stashes", Path("/repo"))

    assert result is completed
    mock_run.assert_called_once_with(
        ["git", "stash", "list"],
        cwd=Path("/repo"),
        stdout=CAPTURE,
        stderr=CAPTURE,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
    )


def test_failure_with_stderr_includes_stderr_in_error() -> None:
    """Test that a checked failure names the operation, command, exit code and stderr."""
    failed = _completed(1, stderr="error: stash@{9} is not a valid reference\n")
    with patch(RUN, return_value=failed):
        with pytest.raises(RuntimeError) as exc_info:
            run_git(["stash", "drop", "stash@{9}"], "drop stash stash@{9}", Path("/repo"))

    error_message = str(exc_info.value)
    assert "Failed to drop stash stash@{9}" in error_message
    assert "Command: git stash drop stash@{9}" in error_message
    assert "Exit code: 1" in error_message
    assert "stderr: error: stash@{9} is not a valid reference" in error_message


def test_check_false_returns_failure_without_raising() -> None:
    with patch(RUN, return_value=_completed(1)):
        result = run_git(
            ["stash", "show", "-p", "stash@{3}"], "show stash", Path("/repo"), check=False
        )

    assert result.returncode == 1


def test_streams_passed_through_to_subprocess() -> None:
    """Test that the terminal and DEVNULL routing reach subprocess.run unchanged."""
    with patch(RUN, return_value=_completed(0)) as mock_run:
        run_git(
            ["stash", "show", "-p", "stash@{0}"],
            "show stash",
            Path("/repo"),
            check=False,
            stdout=None,
            stderr=subprocess.DEVNULL,
        )

    call_kwargs = mock_run.call_args.kwargs
    assert call_kwargs["stdout"] is None
    assert call_kwargs["stderr"] == subprocess.DEVNULL


def test_missing_git_raises_runtime_error() -> None:
    with patch(RUN, side_effect=FileNotFoundError("git")) as mock_run:
        with pytest.raises(RuntimeError) as exc_info:
            run_git(["status"], "check git status", Path("/repo"))

    assert str(exc_info.value) == "git not found while trying to check git status"
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)
    assert mock_run.call_count == 1


def test_launch_failure_raises_runtime_error() -> None:
    with patch(RUN, side_effect=PermissionError("denied")):
        with pytest.raises(RuntimeError, match="Could not launch git while trying to check"):
            run_git(["status"], "check git status", Path("/repo"))


def test_format_git_failure_omits_blank_streams() -> None:
    completed = _completed(128, stdout="", stderr="   \n  ")

    message = format_git_failure(["git", "status"], "check git status", completed)

    assert message == "Failed to check git status\nCommand: git status\nExit code: 128"


def test_format_git_failure_includes_stdout() -> None:
    completed = _completed(1, stdout="CONFLICT (content): app.py\n")

    message = format_git_failure(["git", "stash", "apply"], "apply stash", completed)

    assert message.endswith("stdout: CONFLICT (content): app.py")
