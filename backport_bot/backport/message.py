"""Consolidated commit message for a backport."""

from typing import Sequence

from ..models import CommitRecord


def format_commit(index: int, commit: CommitRecord) -> str:
    """Numbered block describing one original commit."""
    author, committer = commit.author, commit.committer
    lines = [
        f"[Commit {index}]",
        f"{commit.message}\n",
        f"Original sha: {commit.sha}",
        f"Authored by {author.name} <{author.email}> on {author.date}",
        f"Committed by {committer.name} <{committer.email}> on {committer.date}",
    ]
    return "\n".join(lines)


def compose_message(commits: Sequence[CommitRecord]) -> str:
    """Join one block per commit, in pull request order, separated by a blank line."""
    return "\n\n".join(
        format_commit(index, commit)
        for index, commit in enumerate(commits, 1)
    )
