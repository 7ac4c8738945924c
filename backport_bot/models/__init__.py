"""Data models for backport runs."""

from .backport import (
    Signature,
    PullRequestRef,
    PullRequestInfo,
    CommitRecord,
    ApplyResult,
    TargetState,
    BackportTarget,
    BackportRun,
    derive_branch_name,
)

__all__ = [
    "Signature",
    "PullRequestRef",
    "PullRequestInfo",
    "CommitRecord",
    "ApplyResult",
    "TargetState",
    "BackportTarget",
    "BackportRun",
    "derive_branch_name",
]
