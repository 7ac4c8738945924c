"""Sequences a complete backport run."""

import asyncio
from typing import Callable, List, Sequence

from ..config import BackportConfig, GitAuth
from ..models import (
    BackportRun,
    BackportTarget,
    CommitRecord,
    PullRequestInfo,
    derive_branch_name,
)
from ..tools import GitHubTool, GitTool
from ..utils import get_logger
from .backporter import BranchBackporter
from .diff_fetcher import DiffFetcher
from .inspector import PRInspector
from .message import compose_message
from .publisher import TrackerPublisher
from .pusher import PushCoordinator

GitOpener = Callable[[str, str, GitAuth], GitTool]


class BackportOrchestrator:
    """
    Runs one backport of a merged pull request onto a list of branches.

    Phases:
    - Inspect and validate the PR (no side effects)
    - Stage the diff and fetch the local checkout, concurrently
    - Create, patch and commit each backport branch, sequentially
    - Push each branch, sequentially
    - File an issue and a pull request per branch, concurrently

    Any error except a patch conflict ends the run where it happens.
    Branches already created or pushed are left in place.
    """

    def __init__(
        self,
        github: GitHubTool,
        config: BackportConfig,
        git_opener: GitOpener = GitTool.open_or_clone
    ):
        """
        Initialize the orchestrator.

        Args:
            github: GitHub tool bound to the pull request being backported
            config: Backport configuration
            git_opener: Returns the GitTool for (path, remote url, auth)
        """
        self.github = github
        self.config = config
        self.git_opener = git_opener
        self.logger = get_logger()

    def plan(
        self,
        info: PullRequestInfo,
        commits: Sequence[CommitRecord],
        targets: Sequence[str]
    ) -> BackportRun:
        """Build the run: consolidated message plus one target per branch."""
        return BackportRun(
            pr=info,
            consolidated_message=compose_message(commits),
            targets=[
                BackportTarget(
                    target_branch=target,
                    derived_branch=derive_branch_name(
                        self.config.branch_prefix, info.number, target, info.head_ref
                    ),
                )
                for target in targets
            ],
        )

    async def prepare_repository(self, info: PullRequestInfo) -> GitTool:
        """Open (or clone) the checkout of the PR's repository and fetch the remote."""
        path = str(self.config.checkout_path(info.repo_full_name))
        auth = self.config.git_auth
        git = await asyncio.to_thread(self.git_opener, path, info.source_repo_url, auth)
        await asyncio.to_thread(git.fetch, self.config.remote_name, auth)
        self.logger.info(f"Fetched {self.config.remote_name} into {path}")
        return git

    async def run(self, targets: List[str]) -> BackportRun:
        """
        Backport the pull request onto ``targets``.

        Returns:
            The completed run; ``run.report()`` gives the summary line
        """
        info, commits = await PRInspector(self.github).inspect(targets)
        run = self.plan(info, commits, targets)

        fetcher = DiffFetcher(self.github)
        async with fetcher.staged():
            # both settle before any error propagates, so the exit sees the staged path
            outcomes = await asyncio.gather(
                fetcher.fetch(info),
                self.prepare_repository(info),
                return_exceptions=True,
            )
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome
            diff_path, git = outcomes

            await BranchBackporter(git, self.config).backport(run, diff_path)
            await PushCoordinator(git, self.config).push(run)
            await TrackerPublisher(self.github, self.config).publish(run)

        self.logger.info(run.report())
        return run
