"""Tracking issues and pull requests for pushed backports."""

import asyncio
from typing import Dict, List

from ..config import BackportConfig
from ..errors import PublishError
from ..models import BackportRun, BackportTarget, TargetState
from ..tools import GitHubTool
from ..utils import get_logger


class TrackerPublisher:
    """
    Files one tracking issue and one pull request per target.

    Targets touch disjoint remote resources, so they are published
    concurrently; failures are gathered and raised together.
    """

    def __init__(self, github: GitHubTool, config: BackportConfig):
        self.github = github
        self.config = config
        self.logger = get_logger()

    def labels_for(self, target: BackportTarget) -> List[str]:
        labels = [self.config.backport_label]
        if target.has_conflicts:
            labels.append(self.config.conflict_label)
        return labels

    async def publish_target(self, run: BackportRun, target: BackportTarget) -> None:
        number = run.pr.number
        issue = await asyncio.to_thread(
            self.github.create_issue,
            f"[backport] PR #{number} to {target.target_branch}",
            run.commit_message(target.target_branch),
            run.pr.merged_by_login,
            self.labels_for(target),
        )
        target.issue_number = issue.number

        pull = await asyncio.to_thread(
            self.github.create_pull_request,
            issue,
            target.derived_branch,
            target.target_branch,
        )
        target.pull_request_number = pull.number
        target.advance(TargetState.PUBLISHED)

    async def publish(self, run: BackportRun) -> None:
        """
        Publish every target.

        Raises:
            PublishError: at least one target failed; the others were still
                attempted and their results are kept on the run
        """
        results = await asyncio.gather(
            *(self.publish_target(run, target) for target in run.targets),
            return_exceptions=True,
        )

        failures: Dict[str, BaseException] = {}
        for target, result in zip(run.targets, results):
            if isinstance(result, BaseException):
                self.logger.error(f"Publishing backport to {target.target_branch} failed: {result}")
                failures[target.target_branch] = result

        if failures:
            published = [t.target_branch for t in run.targets if t.target_branch not in failures]
            raise PublishError(failures, published)
