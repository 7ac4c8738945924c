"""Shared fixtures: in-memory stand-ins for GitHub and the local checkout."""

import itertools
import threading
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Dict, List, Optional, Union

import pytest

from backport_bot.config import BackportConfig, GitAuth
from backport_bot.errors import GitOperationError, RemoteServiceError
from backport_bot.models import ApplyResult, CommitRecord, PullRequestInfo, Signature


SAMPLE_DIFF = """diff --git a/app.py b/app.py
index 83db48f..bf269f4 100644
--- a/app.py
+++ b/app.py
@@ -1,3 +1,3 @@
 def handler():
-    return 1
+    return 2
 
"""


def make_info(**overrides) -> PullRequestInfo:
    values = dict(
        number=42,
        base_ref="main",
        head_ref="feature-x",
        merged=True,
        merged_by_login="octocat",
        diff_url="https://api.github.com/repos/acme/widgets/pulls/42",
        source_repo_url="git@github.com:acme/widgets.git",
        repo_full_name="acme/widgets",
        title="Fix bug",
    )
    values.update(overrides)
    return PullRequestInfo(**values)


def make_commit(sha="abc123", message="Fix bug", name="A", email="a@x.com", date="2020-01-01") -> CommitRecord:
    signature = Signature(name=name, email=email, date=date)
    return CommitRecord(sha=sha, message=message, author=signature, committer=signature)


class FakeGitHub:
    """Records every call; issue and PR numbers are handed out in sequence."""

    def __init__(self, info: PullRequestInfo, commits: List[CommitRecord], diff: Union[str, bytes] = SAMPLE_DIFF):
        self.info = info
        self.commits = commits
        self.diff = diff
        self.diff_fetches = 0
        self.calls: List[str] = []
        self.issues: List[SimpleNamespace] = []
        self.pulls: List[SimpleNamespace] = []
        self.fail_issue_for: set = set()
        self._numbers = itertools.count(100)
        self._lock = threading.Lock()

    def connect(self) -> None:
        self.calls.append("connect")

    def get_info(self) -> PullRequestInfo:
        self.calls.append("get_info")
        return self.info

    def get_commits(self) -> List[CommitRecord]:
        self.calls.append("get_commits")
        return list(self.commits)

    def get_diff(self, url: str) -> bytes:
        self.diff_fetches += 1
        return self.diff.encode("utf-8") if isinstance(self.diff, str) else self.diff

    def create_issue(self, title, body, assignee, labels):
        if any(title.endswith(f" to {target}") for target in self.fail_issue_for):
            raise RemoteServiceError(f"Cannot create issue '{title}'")
        with self._lock:
            issue = SimpleNamespace(
                number=next(self._numbers), title=title, body=body, assignee=assignee, labels=list(labels)
            )
            self.issues.append(issue)
        return issue

    def create_pull_request(self, issue, head, base):
        with self._lock:
            pull = SimpleNamespace(number=next(self._numbers), issue=issue.number, head=head, base=base)
            self.pulls.append(pull)
        return pull


@dataclass
class FakeCommit:
    hexsha: str


@dataclass
class FakeGitTool:
    """
    Checkout stand-in that logs operations in order.

    ``conflicting`` names target branches whose patch applies with
    conflicts; ``failures`` maps an operation name to the argument that
    makes it fail.
    """
    conflicting: set = field(default_factory=set)
    failures: Dict[str, str] = field(default_factory=dict)
    branches: Dict[str, FakeCommit] = field(default_factory=dict)
    remote_branches: set = field(default_factory=set)
    ops: List[tuple] = field(default_factory=list)
    commits: Dict[str, dict] = field(default_factory=dict)
    pushed: List[str] = field(default_factory=list)
    current: Optional[str] = None
    applied_patches: List[str] = field(default_factory=list)

    def _maybe_fail(self, op: str, arg: str) -> None:
        if self.failures.get(op) == arg:
            raise GitOperationError(f"{op} failed for {arg}")

    def fetch(self, remote_name, auth):
        self.ops.append(("fetch", remote_name))

    def resolve_remote_branch_tip(self, remote_name, branch):
        self.ops.append(("resolve", branch))
        self._maybe_fail("resolve", branch)
        return FakeCommit(f"tip-{branch}")

    def branch_exists(self, name):
        return name in self.branches

    def remote_branch_exists(self, remote_name, name):
        return name in self.remote_branches

    def create_branch(self, name, commit, force=False):
        self.ops.append(("create_branch", name))
        if name in self.branches and not force:
            raise GitOperationError(f"branch {name} exists")
        self.branches[name] = commit

    def checkout(self, name):
        self.ops.append(("checkout", name))
        self.current = name

    def apply_patch(self, path):
        self.ops.append(("apply", self.current))
        self._maybe_fail("apply", self.current)
        with open(path, encoding="utf-8") as f:
            self.applied_patches.append(f.read())
        if any(f"-{target}-" in self.current for target in self.conflicting):
            return ApplyResult(applied=True, conflicted=True, conflicted_paths=["app.py"])
        return ApplyResult(applied=True)

    def stage_all(self):
        self.ops.append(("stage_all", self.current))

    def write_index_tree(self):
        self.ops.append(("write_tree", self.current))
        return f"tree-{self.current}"

    def current_head_commit(self):
        return self.branches[self.current]

    def create_commit(self, ref_name, author, committer, message, tree, parents):
        self.ops.append(("commit", ref_name))
        commit = FakeCommit(f"{len(self.commits) + 1:040d}")
        self.commits[ref_name] = {
            "author": author,
            "committer": committer,
            "message": message,
            "tree": tree,
            "parents": [p.hexsha for p in parents],
        }
        self.branches[ref_name] = commit
        return commit

    def push(self, remote_name, refspecs, auth):
        self.ops.append(("push", refspecs[0]))
        self._maybe_fail("push", refspecs[0])
        self.pushed.extend(refspecs)


@pytest.fixture
def config(tmp_path):
    return BackportConfig(
        github_token="test-token",
        repos_dir=str(tmp_path / "repos"),
        git_auth=GitAuth(ssh_private_key="/keys/id_rsa"),
    )


@pytest.fixture
def github():
    return FakeGitHub(make_info(), [make_commit()])


@pytest.fixture
def git():
    return FakeGitTool()


@pytest.fixture
def make_run(config):
    """Build a BackportRun for the sample PR and the given targets."""
    from backport_bot.backport import BackportOrchestrator

    def _make(targets, info=None, commits=None):
        orchestrator = BackportOrchestrator(github=None, config=config)
        return orchestrator.plan(info or make_info(), commits or [make_commit()], targets)

    return _make
