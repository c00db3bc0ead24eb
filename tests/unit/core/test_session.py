"""Tests for the review loop state machine (business logic over FakeGitOps)."""

from collections.abc import Iterator
from pathlib import Path

import click
import pytest

from stashtriage.core import session
from stashtriage.core.context import StashTriageContext
from stashtriage.core.session import TriageSession, read_action
from tests.fakes.gitops import FakeGitOps, FakeStash


def _feed_actions(monkeypatch: pytest.MonkeyPatch, actions: list[str | None]) -> None:
    """Answer successive prompts with ``actions``; None stands for end of input."""
    answers: Iterator[str | None] = iter(actions)
    monkeypatch.setattr(session, "read_action", lambda: next(answers))


def test_read_action_end_of_input_returns_none(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def abort(*args: object, **kwargs: object) -> str:
        raise click.Abort()

    monkeypatch.setattr(click, "prompt", abort)

    assert read_action() is None
    # Trailing newline keeps the shell prompt on its own line
    assert capsys.readouterr().out == "\n"


def test_read_action_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(click, "prompt", lambda *args, **kwargs: "  d  ")

    assert read_action() == "d"


def test_end_of_input_ends_session(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed_actions(monkeypatch, ["s", None])
    git_ops = FakeGitOps(stashes=[FakeStash(), FakeStash(), FakeStash()])
    triage = TriageSession(StashTriageContext.for_test(git_ops, Path("/repo")))

    triage.run()

    assert triage.done is True
    assert triage.cursor.position == 1
    assert git_ops.operations == []


def test_skip_advances_cursor(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed_actions(monkeypatch, ["s", "s", "q"])
    git_ops = FakeGitOps(stashes=[FakeStash(), FakeStash(), FakeStash()])
    triage = TriageSession(StashTriageContext.for_test(git_ops, Path("/repo")))

    triage.run()

    assert triage.cursor.position == 2
    assert triage.found_any is True


def test_empty_stack_marks_nothing_found(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _feed_actions(monkeypatch, [])
    triage = TriageSession(StashTriageContext.for_test(FakeGitOps(), Path("/repo")))

    triage.run()

    assert triage.found_any is False
    assert capsys.readouterr().out == "No stashes found.\n"


def test_promotion_guard_evaluated_once(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed_actions(monkeypatch, ["b", "b", "q"])
    git_ops = FakeGitOps(stashes=[FakeStash(files={"a": "1"})], modified={"wip": "x"})
    calls: list[Path] = []

    def guard(git: FakeGitOps, cwd: Path) -> bool:
        calls.append(cwd)
        return False

    monkeypatch.setattr(session, "check_promotion_allowed", guard)
    triage = TriageSession(StashTriageContext.for_test(git_ops, Path("/repo")))

    triage.run()

    assert calls == [Path("/repo")]
    assert triage.promotion_allowed is False
    assert git_ops.operations == []


def test_show_diff_argument_overrides_config() -> None:
    ctx = StashTriageContext.for_test(FakeGitOps(), Path("/repo"))

    assert TriageSession(ctx).show_diff is True
    assert TriageSession(ctx, show_diff=False).show_diff is False
