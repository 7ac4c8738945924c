"""Push backport branches to the remote."""

import asyncio

from ..config import BackportConfig
from ..models import BackportRun, BackportTarget, TargetState
from ..tools import GitTool
from ..utils import get_logger


class PushCoordinator:
    """
    Pushes committed backport branches, one ref at a time.

    The transport refuses concurrent pushes on one repository, so refs go
    out sequentially and the first failure stops the rest.
    """

    def __init__(self, git: GitTool, config: BackportConfig):
        self.git = git
        self.config = config
        self.logger = get_logger()

    def refspec(self, target: BackportTarget) -> str:
        force = "+" if self.config.overwrite_existing else ""
        return f"{force}{target.ref}:{target.ref}"

    async def push(self, run: BackportRun) -> None:
        for target in run.targets:
            refspec = self.refspec(target)
            self.logger.info(f"Pushing {refspec} to {self.config.remote_name}")
            await asyncio.to_thread(
                self.git.push, self.config.remote_name, [refspec], self.config.git_auth
            )
            target.advance(TargetState.PUSHED)
