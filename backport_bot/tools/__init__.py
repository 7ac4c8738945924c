"""Collaborator adapters for GitHub and the local git checkout."""

from .github_tool import GitHubTool
from .git_tool import GitTool
from .diff_parser import FileDiff, parse_pr_diff, summarize, unquote_path

__all__ = [
    "GitHubTool",
    "GitTool",
    "FileDiff",
    "parse_pr_diff",
    "unquote_path",
    "summarize",
]
