"""Exceptions raised by the backport engine."""

from typing import Dict, List, Optional


class BackportError(Exception):
    """Base class for every error the backport engine raises."""


class ConfigError(BackportError):
    """Configuration is missing or invalid."""


class ValidationError(BackportError):
    """Request rejected before any repository mutation."""


class NotMerged(ValidationError):
    """The pull request has not been merged."""


class InvalidTarget(ValidationError):
    """A target branch is the pull request's own base branch."""


class GitOperationError(BackportError):
    """A repository operation failed."""


class BranchExistsError(GitOperationError):
    """The derived backport branch already exists locally."""


class RemoteServiceError(BackportError):
    """GitHub or the diff endpoint returned an error."""


class PublishError(RemoteServiceError):
    """
    One or more targets failed to publish their issue or pull request.

    Publishing runs concurrently across targets, so every failure is
    collected before this is raised.
    """

    def __init__(
        self,
        failures: Dict[str, BaseException],
        published: Optional[List[str]] = None
    ):
        self.failures = failures
        self.published = published or []
        targets = ", ".join(sorted(failures))
        super().__init__(f"Failed to publish backports for: {targets}")
