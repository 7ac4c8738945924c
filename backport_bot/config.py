"""Configuration for the backport bot."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional
import os
import shlex

from .errors import ConfigError


BRANCH_POLICIES = ("fail", "overwrite")


@dataclass
class GitAuth:
    """SSH credentials for clone, fetch and push, built once at startup."""

    ssh_private_key: Optional[str] = None
    strict_host_key_checking: bool = False

    def env(self) -> Dict[str, str]:
        """Environment overrides for git commands that talk to the remote."""
        parts = ["ssh"]
        if self.ssh_private_key:
            parts += ["-i", self.ssh_private_key, "-o", "IdentitiesOnly=yes"]
        if not self.strict_host_key_checking:
            parts += ["-o", "StrictHostKeyChecking=no"]
        return {"GIT_SSH_COMMAND": " ".join(shlex.quote(p) for p in parts)}

    @classmethod
    def from_env(cls) -> "GitAuth":
        default_key = Path.home() / ".ssh" / "backport_id_rsa"
        key = os.environ.get("BACKPORT_SSH_KEY")
        if key is None and default_key.exists():
            key = str(default_key)
        return cls(
            ssh_private_key=key,
            strict_host_key_checking=os.environ.get("BACKPORT_SSH_STRICT", "false").lower() == "true",
        )


@dataclass
class BackportConfig:
    """Configuration for a backport run."""

    # GitHub settings
    github_token: Optional[str] = None

    # Local checkouts, one per origin repository, reused across runs
    repos_dir: str = "repos"
    remote_name: str = "origin"

    # Naming and identity
    branch_prefix: str = "backport"
    bot_name: str = "backport-bot"
    bot_email: str = "backport-bot@users.noreply.github.com"

    # What to do when the derived branch already exists: fail or overwrite
    on_existing_branch: str = "fail"

    # Labels applied to tracking issues
    backport_label: str = "backport"
    conflict_label: str = "has conflicts"

    git_auth: GitAuth = field(default_factory=GitAuth)

    @classmethod
    def from_env(cls) -> "BackportConfig":
        """Create config from environment variables."""
        return cls(
            github_token=os.environ.get("GITHUB_TOKEN"),
            repos_dir=os.environ.get("BACKPORT_REPOS_DIR", "repos"),
            remote_name=os.environ.get("BACKPORT_REMOTE", "origin"),
            branch_prefix=os.environ.get("BACKPORT_BRANCH_PREFIX", "backport"),
            bot_name=os.environ.get("BACKPORT_BOT_NAME", "backport-bot"),
            bot_email=os.environ.get("BACKPORT_BOT_EMAIL", "backport-bot@users.noreply.github.com"),
            on_existing_branch=os.environ.get("BACKPORT_ON_EXISTING_BRANCH", "fail").lower(),
            git_auth=GitAuth.from_env(),
        )

    def validate(self) -> None:
        if not self.github_token:
            raise ConfigError("GitHub token required. Set GITHUB_TOKEN env var.")
        if self.on_existing_branch not in BRANCH_POLICIES:
            raise ConfigError(
                f"on_existing_branch must be one of {', '.join(BRANCH_POLICIES)}, "
                f"got {self.on_existing_branch!r}"
            )

    @property
    def overwrite_existing(self) -> bool:
        return self.on_existing_branch == "overwrite"

    def checkout_path(self, repo_full_name: str) -> Path:
        """Local checkout directory for ``owner/repo``."""
        return Path(self.repos_dir).resolve() / repo_full_name
