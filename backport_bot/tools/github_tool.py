"""GitHub API wrapper for backport operations."""

import os
from datetime import datetime
from typing import List, Optional, Sequence

import requests
from github import Github, GithubException
from github.GithubObject import NotSet
from github.Issue import Issue
from github.PullRequest import PullRequest
from github.Repository import Repository as GHRepository

from ..errors import ConfigError, RemoteServiceError
from ..models import CommitRecord, PullRequestInfo, Signature
from ..utils import get_logger

DEFAULT_BASE_URL = "https://api.github.com"
DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"


def _format_date(value) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return str(value) if value is not None else ""


class GitHubTool:
    """
    GitHub API wrapper for one pull request and its repository.

    Handles:
    - Fetching PR metadata, commits and the unified diff
    - Creating tracking issues
    - Opening pull requests from tracking issues
    """

    def __init__(
        self,
        repo: str,
        pr_number: int,
        token: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0
    ):
        """
        Initialize GitHub tool.

        Args:
            repo: Repository in format "owner/repo"
            pr_number: Pull request number
            token: GitHub token (defaults to GITHUB_TOKEN env var)
            base_url: REST API root, for GitHub Enterprise hosts
            timeout: Seconds to wait for the diff download
        """
        self.token = token or os.environ.get("GITHUB_TOKEN")
        if not self.token:
            raise ConfigError("GitHub token required. Set GITHUB_TOKEN env var or pass token parameter.")

        self.repo_name = repo
        self.pr_number = pr_number
        self.timeout = timeout
        self.logger = get_logger()
        self.gh = Github(self.token, base_url=base_url)
        self._repo: Optional[GHRepository] = None
        self._pr: Optional[PullRequest] = None

    @property
    def repo(self) -> GHRepository:
        """Get the repository object (cached)."""
        if self._repo is None:
            try:
                self._repo = self.gh.get_repo(self.repo_name)
            except GithubException as e:
                raise RemoteServiceError(f"Cannot load repository {self.repo_name}: {e}") from e
        return self._repo

    @property
    def pr(self) -> PullRequest:
        """Get the pull request object (cached)."""
        if self._pr is None:
            try:
                self._pr = self.repo.get_pull(self.pr_number)
            except GithubException as e:
                raise RemoteServiceError(f"Cannot load PR #{self.pr_number}: {e}") from e
        return self._pr

    def connect(self) -> None:
        """
        Load the repository and pull request once.

        Call before sharing the tool between threads; the cached
        properties are not guarded by a lock.
        """
        _ = self.pr

    def get_info(self) -> PullRequestInfo:
        """Snapshot the pull request metadata needed for a backport."""
        pr = self.pr
        try:
            merged_by = pr.merged_by.login if pr.merged_by is not None else None
            return PullRequestInfo(
                number=pr.number,
                base_ref=pr.base.ref,
                head_ref=pr.head.ref,
                merged=bool(pr.merged),
                merged_by_login=merged_by,
                diff_url=pr.url,
                source_repo_url=pr.base.repo.ssh_url,
                repo_full_name=pr.base.repo.full_name,
                title=pr.title,
            )
        except GithubException as e:
            raise RemoteServiceError(f"Cannot read PR #{self.pr_number}: {e}") from e

    def get_commits(self) -> List[CommitRecord]:
        """Get the pull request commits in their original order."""
        try:
            records = []
            for commit in self.pr.get_commits():
                git_commit = commit.commit
                records.append(CommitRecord(
                    sha=commit.sha,
                    message=git_commit.message,
                    author=Signature(
                        name=git_commit.author.name,
                        email=git_commit.author.email,
                        date=_format_date(git_commit.author.date),
                    ),
                    committer=Signature(
                        name=git_commit.committer.name,
                        email=git_commit.committer.email,
                        date=_format_date(git_commit.committer.date),
                    ),
                ))
            return records
        except GithubException as e:
            raise RemoteServiceError(f"Cannot list commits of PR #{self.pr_number}: {e}") from e

    def get_diff(self, url: str) -> bytes:
        """
        Download the unified diff served at ``url`` as raw bytes.

        PyGithub has no diff accessor, so the API is queried directly with
        the diff media type.
        """
        headers = {
            "Accept": DIFF_MEDIA_TYPE,
            "Authorization": f"token {self.token}",
        }
        try:
            response = requests.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise RemoteServiceError(f"Cannot download diff from {url}: {e}") from e
        return response.content

    def create_issue(
        self,
        title: str,
        body: str,
        assignee: Optional[str],
        labels: Sequence[str]
    ) -> Issue:
        """Open a tracking issue."""
        try:
            issue = self.repo.create_issue(
                title=title,
                body=body,
                assignee=assignee if assignee else NotSet,
                labels=list(labels),
            )
        except GithubException as e:
            raise RemoteServiceError(f"Cannot create issue '{title}': {e}") from e
        self.logger.info(f"Created issue #{issue.number}: {title}")
        return issue

    def create_pull_request(self, issue: Issue, head: str, base: str) -> PullRequest:
        """Turn a tracking issue into a pull request from ``head`` into ``base``."""
        try:
            pull = self.repo.create_pull(base=base, head=head, issue=issue)
        except GithubException as e:
            raise RemoteServiceError(f"Cannot open pull request {head} -> {base}: {e}") from e
        self.logger.info(f"Opened PR #{pull.number}: {head} -> {base}")
        return pull
