"""Branch names derived from commit messages."""

from collections.abc import Iterable


class MissingCommitSubjectError(ValueError):
    """Raised when a commit message has no usable subject line."""


def find_commit_subject(lines: Iterable[str]) -> str:
    """Return the first line that is non-empty and not a ``#`` comment.

    Raises:
        MissingCommitSubjectError: If every line is empty or a comment
    """
    for line in lines:
        line = line.rstrip("\r\n")
        if line and not line.startswith("#"):
            return line
    raise MissingCommitSubjectError("Commit message has no subject line")


def slugify_subject(subject: str) -> str:
    """Turn a commit subject into a branch-safe slug.

    Words are joined with underscores, anything other than letters, digits
    and underscores is dropped, and the result is lower-cased.

    Example:
        >>> slugify_subject("Fix login bug!! ")
        'fix_login_bug'
    """
    joined = "_".join(subject.split())
    return "".join(c for c in joined if c == "_" or c.isalnum()).lower()


def branch_name_for_subject(subject: str, prefix: str) -> str:
    """Build the namespaced branch name for a commit subject.

    Raises:
        MissingCommitSubjectError: If no letters or digits survive slugging
    """
    slug = slugify_subject(subject)
    if not slug.strip("_"):
        raise MissingCommitSubjectError(f"Commit subject {subject!r} yields an empty branch name")
    return f"{prefix}{slug}"
