"""Download and stage the pull request diff."""

import asyncio
import os
import tempfile
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from ..errors import RemoteServiceError
from ..models import PullRequestInfo
from ..tools import GitHubTool, parse_pr_diff, summarize
from ..utils import get_logger


class DiffFetcher:
    """
    Owns the temporary file holding the pull request diff.

    The diff is staged byte for byte; only the log summary decodes it.
    ``release()`` removes the file and is safe to call on every exit path,
    including before ``fetch()`` has finished or when it failed.
    """

    def __init__(self, github: GitHubTool, prefix: str = "backport-"):
        self.github = github
        self.prefix = prefix
        self.path: Optional[str] = None
        self.logger = get_logger()

    @asynccontextmanager
    async def staged(self) -> AsyncIterator["DiffFetcher"]:
        """Scope in which a fetched diff lives; it is released on exit."""
        try:
            yield self
        finally:
            self.release()

    async def fetch(self, info: PullRequestInfo) -> str:
        """
        Download the diff of ``info`` and write it to a temporary file.

        Returns:
            Path of the staged diff
        """
        diff = await asyncio.to_thread(self.github.get_diff, info.diff_url)
        if not diff.strip():
            raise RemoteServiceError(f"Diff of PR #{info.number} is empty")

        fd, path = tempfile.mkstemp(prefix=self.prefix, suffix=".diff")
        self.path = path
        with os.fdopen(fd, "wb") as f:
            f.write(diff)
            if not diff.endswith(b"\n"):
                f.write(b"\n")

        file_diffs = parse_pr_diff(diff.decode("utf-8", errors="replace"))
        self.logger.info(f"Staged diff of PR #{info.number} at {path} ({summarize(file_diffs)})")
        return path

    def release(self) -> None:
        if self.path is None:
            return
        try:
            os.unlink(self.path)
            self.logger.debug(f"Removed staged diff {self.path}")
        except FileNotFoundError:
            pass
        self.path = None
