"""Data models for a backport run."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..errors import GitOperationError


@dataclass(frozen=True)
class Signature:
    """Name, email and timestamp of a commit author or committer."""
    name: str
    email: str
    date: str = ""


@dataclass(frozen=True)
class PullRequestRef:
    """Identifies a pull request by repository and number."""
    owner: str
    repo: str
    number: int
    host: str = "github.com"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def api_url(self) -> str:
        """REST API root for the host (GitHub Enterprise serves it under /api/v3)."""
        if self.host == "github.com":
            return "https://api.github.com"
        return f"https://{self.host}/api/v3"


@dataclass(frozen=True)
class PullRequestInfo:
    """Snapshot of pull request metadata, fetched once per run."""
    number: int
    base_ref: str
    head_ref: str
    merged: bool
    merged_by_login: Optional[str]
    diff_url: str
    source_repo_url: str
    repo_full_name: str = ""
    title: str = ""


@dataclass(frozen=True)
class CommitRecord:
    """One commit of the original pull request."""
    sha: str
    message: str
    author: Signature
    committer: Signature


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of applying a patch with a three-way merge."""
    applied: bool
    conflicted: bool = False
    conflicted_paths: List[str] = field(default_factory=list)


class TargetState(Enum):
    """Lifecycle of a single backport target."""
    PENDING = 0
    CREATED = 1
    CHECKED_OUT = 2
    PATCH_APPLIED = 3
    COMMITTED = 4
    PUSHED = 5
    PUBLISHED = 6


def derive_branch_name(prefix: str, pr_number: int, target: str, head_ref: str) -> str:
    """Name of the branch that carries a backport of ``pr_number`` onto ``target``."""
    return f"{prefix}/{pr_number}-{target}-{head_ref}"


@dataclass
class BackportTarget:
    """A target branch and the state of its backport."""
    target_branch: str
    derived_branch: str
    has_conflicts: bool = False
    state: TargetState = TargetState.PENDING
    conflicted_paths: List[str] = field(default_factory=list)
    commit_sha: Optional[str] = None
    issue_number: Optional[int] = None
    pull_request_number: Optional[int] = None

    def advance(self, state: TargetState) -> None:
        """Move to ``state``; transitions only go forward."""
        if state.value <= self.state.value:
            raise GitOperationError(
                f"{self.derived_branch}: cannot move from {self.state.name} to {state.name}"
            )
        self.state = state

    @property
    def ref(self) -> str:
        return f"refs/heads/{self.derived_branch}"


@dataclass
class BackportRun:
    """Everything one invocation produces, discarded after publishing."""
    pr: PullRequestInfo
    consolidated_message: str
    targets: List[BackportTarget] = field(default_factory=list)

    def commit_message(self, target: str) -> str:
        """Message used for both the backport commit and its tracking issue."""
        return f"Backport PR #{self.pr.number} to {target}\n\n{self.consolidated_message}"

    @property
    def target_names(self) -> List[str]:
        return [t.target_branch for t in self.targets]

    @property
    def conflicted_targets(self) -> List[str]:
        return [t.target_branch for t in self.targets if t.has_conflicts]

    def report(self) -> str:
        return f"Backported pull request #{self.pr.number} to {', '.join(self.target_names)}"
