"""Pull request inspection and validation."""

import asyncio
from typing import List, Sequence, Tuple

from ..errors import InvalidTarget, NotMerged, ValidationError
from ..models import CommitRecord, PullRequestInfo
from ..tools import GitHubTool
from ..utils import get_logger


def validate_targets(info: PullRequestInfo, targets: Sequence[str]) -> None:
    """
    Reject a backport request before anything is mutated.

    Raises:
        ValidationError: no targets, or a target listed twice
        InvalidTarget: a target is the pull request's own base branch
        NotMerged: the pull request is not merged
    """
    if not targets:
        raise ValidationError("At least one target branch is required")

    duplicates = sorted({t for t in targets if list(targets).count(t) > 1})
    if duplicates:
        raise ValidationError(f"Target branches listed more than once: {', '.join(duplicates)}")

    if info.base_ref in targets:
        raise InvalidTarget(
            f"Cannot backport into original PR target branch {info.base_ref}"
        )

    if not info.merged:
        raise NotMerged(f"Cannot backport unmerged pull request #{info.number}")


class PRInspector:
    """Fetches pull request metadata and commits, then validates the request."""

    def __init__(self, github: GitHubTool):
        self.github = github
        self.logger = get_logger()

    async def inspect(self, targets: Sequence[str]) -> Tuple[PullRequestInfo, List[CommitRecord]]:
        """
        Fetch metadata and commits concurrently and validate ``targets``.

        Args:
            targets: Branches the caller wants the change backported to

        Returns:
            Tuple of (pull request snapshot, commits in original order)
        """
        await asyncio.to_thread(self.github.connect)
        info, commits = await asyncio.gather(
            asyncio.to_thread(self.github.get_info),
            asyncio.to_thread(self.github.get_commits),
        )

        self.logger.info(
            f"PR #{info.number} '{info.title}' ({info.head_ref} -> {info.base_ref}): "
            f"{len(commits)} commits, merged={info.merged}"
        )

        validate_targets(info, targets)
        return info, commits
