"""Local repository operations backed by GitPython."""

from pathlib import Path
from typing import List, Sequence, Union

from git import Actor, Commit, GitCommandError, PushInfo, Repo
from git.exc import BadName
from git.objects import Tree

from ..config import GitAuth
from ..errors import BranchExistsError, GitOperationError
from ..models import ApplyResult
from ..utils import get_logger


class GitTool:
    """
    Wrapper around a single local checkout.

    One checkout exists per origin repository and is reused across runs.
    Its working tree and index are shared state: callers must not run
    two mutating operations at the same time.
    """

    def __init__(self, repo: Repo):
        self.repo = repo
        self.logger = get_logger()

    @classmethod
    def open_or_clone(cls, path: Union[str, Path], remote_url: str, auth: GitAuth) -> "GitTool":
        """Open the checkout at ``path``, cloning ``remote_url`` there first if needed."""
        path = Path(path)
        try:
            if (path / ".git").exists():
                repo = Repo(path)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                get_logger().info(f"Cloning {remote_url} into {path}")
                repo = Repo.clone_from(remote_url, str(path), env=auth.env())
        except GitCommandError as e:
            raise GitOperationError(f"Cannot open or clone {remote_url}: {e}") from e
        return cls(repo)

    @property
    def working_dir(self) -> str:
        return self.repo.working_tree_dir

    def fetch(self, remote_name: str, auth: GitAuth) -> None:
        try:
            with self.repo.git.custom_environment(**auth.env()):
                self.repo.remote(remote_name).fetch()
        except (GitCommandError, ValueError) as e:
            raise GitOperationError(f"Cannot fetch {remote_name}: {e}") from e

    def resolve_remote_branch_tip(self, remote_name: str, branch: str) -> Commit:
        rev = f"{remote_name}/{branch}"
        try:
            return self.repo.commit(rev)
        except (BadName, ValueError, GitCommandError) as e:
            raise GitOperationError(f"Unknown branch {rev}") from e

    def branch_exists(self, name: str) -> bool:
        return name in [head.name for head in self.repo.heads]

    def remote_branch_exists(self, remote_name: str, name: str) -> bool:
        """Whether the last fetch saw ``name`` on ``remote_name``."""
        try:
            refs = self.repo.remote(remote_name).refs
        except ValueError:
            return False
        return name in [ref.remote_head for ref in refs]

    def create_branch(self, name: str, commit: Commit, force: bool = False) -> None:
        """Create ``name`` at ``commit``; with ``force`` an existing branch is reset."""
        if not force and self.branch_exists(name):
            raise BranchExistsError(f"Branch {name} already exists")
        try:
            if force and not self.repo.head.is_detached and self.repo.active_branch.name == name:
                # the checked-out branch must not move under the working tree
                self.repo.git.checkout("--detach")
            self.repo.create_head(name, commit, force=force)
        except (GitCommandError, OSError) as e:
            raise GitOperationError(f"Cannot create branch {name}: {e}") from e

    def checkout(self, name: str) -> None:
        try:
            self.repo.heads[name].checkout()
        except (GitCommandError, IndexError) as e:
            raise GitOperationError(f"Cannot check out {name}: {e}") from e

    def unmerged_paths(self) -> List[str]:
        """Paths the index holds in a conflicted (unmerged) state."""
        output = self.repo.git.diff("--name-only", "--diff-filter=U")
        return [line for line in output.splitlines() if line]

    def apply_patch(self, path: Union[str, Path]) -> ApplyResult:
        """
        Apply a patch with ``git apply --3way``.

        Hunks that do not apply cleanly are merged with conflict markers
        and leave unmerged index entries; that outcome is reported as
        ``conflicted``. Any other failure raises.
        """
        try:
            self.repo.git.apply("--3way", str(path))
        except GitCommandError as e:
            conflicted = self.unmerged_paths()
            if not conflicted:
                raise GitOperationError(f"Cannot apply {path}: {e.stderr.strip()}") from e
            return ApplyResult(applied=True, conflicted=True, conflicted_paths=conflicted)
        return ApplyResult(applied=True)

    def stage_all(self) -> None:
        try:
            self.repo.git.add(A=True)
        except GitCommandError as e:
            raise GitOperationError(f"Cannot stage changes: {e}") from e

    def write_index_tree(self) -> Tree:
        try:
            return self.repo.tree(self.repo.git.write_tree())
        except (GitCommandError, ValueError) as e:
            raise GitOperationError(f"Cannot write tree from index: {e}") from e

    def current_head_commit(self) -> Commit:
        try:
            return self.repo.head.commit
        except ValueError as e:
            raise GitOperationError(f"HEAD does not point to a commit: {e}") from e

    def create_commit(
        self,
        ref_name: str,
        author: Actor,
        committer: Actor,
        message: str,
        tree: Tree,
        parents: Sequence[Commit]
    ) -> Commit:
        """Create a commit from ``tree`` and move ``ref_name`` to it."""
        try:
            commit = Commit.create_from_tree(
                self.repo,
                tree,
                message,
                parent_commits=list(parents),
                head=False,
                author=author,
                committer=committer,
            )
            ref = self.repo.head if ref_name == "HEAD" else self.repo.heads[ref_name]
            ref.set_commit(commit)
        except (GitCommandError, ValueError, IndexError) as e:
            raise GitOperationError(f"Cannot commit to {ref_name}: {e}") from e
        return commit

    def push(self, remote_name: str, refspecs: Sequence[str], auth: GitAuth) -> None:
        """Push ``refspecs`` to ``remote_name``; any rejected ref raises."""
        try:
            remote = self.repo.remote(remote_name)
            with self.repo.git.custom_environment(**auth.env()):
                results = remote.push(refspec=list(refspecs))
        except (GitCommandError, ValueError) as e:
            raise GitOperationError(f"Cannot push {', '.join(refspecs)}: {e}") from e

        for info in results:
            if info.flags & (PushInfo.ERROR | PushInfo.REJECTED | PushInfo.REMOTE_REJECTED):
                raise GitOperationError(
                    f"Push of {info.local_ref or refspecs} rejected: {info.summary.strip()}"
                )
