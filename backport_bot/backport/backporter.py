"""Per-branch backport state machine."""

import asyncio

from git import Actor

from ..config import BackportConfig
from ..errors import BranchExistsError
from ..models import BackportRun, BackportTarget, TargetState
from ..tools import GitTool
from ..utils import get_logger


class BranchBackporter:
    """
    Creates, patches and commits one backport branch per target.

    Targets are processed strictly one after another: every step mutates
    the shared working tree and index of a single checkout.

    Per target:
        CREATED -> CHECKED_OUT -> PATCH_APPLIED (clean or conflicted) -> COMMITTED
    """

    def __init__(self, git: GitTool, config: BackportConfig):
        self.git = git
        self.config = config
        self.signature = Actor(config.bot_name, config.bot_email)
        self.logger = get_logger()

    def check_collisions(self, run: BackportRun) -> None:
        """
        Apply the existing-branch policy to every target before touching any of them.

        A derived branch collides when it exists locally or on the remote
        as of the last fetch.
        """
        if self.config.overwrite_existing:
            return
        remote = self.config.remote_name
        existing = [
            t.derived_branch for t in run.targets
            if self.git.branch_exists(t.derived_branch)
            or self.git.remote_branch_exists(remote, t.derived_branch)
        ]
        if existing:
            raise BranchExistsError(
                f"Backport branches already exist: {', '.join(existing)}"
            )

    async def backport(self, run: BackportRun, diff_path: str) -> BackportRun:
        """
        Materialize every target of ``run``.

        Conflicts are recorded on the target; any other failure propagates
        and leaves later targets untouched.
        """
        self.check_collisions(run)

        for target in run.targets:
            await self.backport_target(run, target, diff_path)

        if run.conflicted_targets:
            self.logger.warning(f"Backports with conflicts: {', '.join(run.conflicted_targets)}")
        return run

    async def backport_target(self, run: BackportRun, target: BackportTarget, diff_path: str) -> None:
        git = self.git
        branch = target.derived_branch
        self.logger.info(f"Backporting PR #{run.pr.number} to {target.target_branch} as {branch}")

        tip = await asyncio.to_thread(
            git.resolve_remote_branch_tip, self.config.remote_name, target.target_branch
        )
        await asyncio.to_thread(git.create_branch, branch, tip, self.config.overwrite_existing)
        target.advance(TargetState.CREATED)
        self.logger.debug(f"{branch}: created at {tip.hexsha}")

        await asyncio.to_thread(git.checkout, branch)
        target.advance(TargetState.CHECKED_OUT)
        self.logger.debug(f"{branch}: checked out")

        result = await asyncio.to_thread(git.apply_patch, diff_path)
        target.advance(TargetState.PATCH_APPLIED)
        if result.conflicted:
            target.has_conflicts = True
            target.conflicted_paths = list(result.conflicted_paths)
            self.logger.warning(
                f"{branch}: patch applied with conflicts in {', '.join(result.conflicted_paths)}"
            )

        # Conflicted files are committed with their markers in place
        await asyncio.to_thread(git.stage_all)
        tree = await asyncio.to_thread(git.write_index_tree)
        parent = await asyncio.to_thread(git.current_head_commit)
        commit = await asyncio.to_thread(
            git.create_commit,
            branch,
            self.signature,
            self.signature,
            run.commit_message(target.target_branch),
            tree,
            [parent],
        )
        target.commit_sha = commit.hexsha
        target.advance(TargetState.COMMITTED)
        self.logger.info(f"{branch}: committed {commit.hexsha[:10]}")
