"""Backport engine.

This module provides:
- PRInspector: Fetches and validates the pull request
- compose_message: Builds the consolidated commit message
- DiffFetcher: Stages the pull request diff in a temporary file
- BranchBackporter: Creates, patches and commits each backport branch
- PushCoordinator: Pushes backport branches one at a time
- TrackerPublisher: Files issues and pull requests per target
- BackportOrchestrator: Runs all of the above in order
"""

from .inspector import PRInspector, validate_targets
from .message import compose_message, format_commit
from .diff_fetcher import DiffFetcher
from .backporter import BranchBackporter
from .pusher import PushCoordinator
from .publisher import TrackerPublisher
from .orchestrator import BackportOrchestrator

__all__ = [
    "PRInspector",
    "validate_targets",
    "compose_message",
    "format_commit",
    "DiffFetcher",
    "BranchBackporter",
    "PushCoordinator",
    "TrackerPublisher",
    "BackportOrchestrator",
]
