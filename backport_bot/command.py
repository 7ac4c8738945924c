"""Parsing of backport requests."""

import re
from typing import List, Tuple

from .errors import ValidationError
from .models import PullRequestRef

BACKPORT_COMMAND = re.compile(r'^\s*backport\s+(\S+)\s+(.+?)\s*$')
PR_URL = re.compile(r'^https://([^/\s]+)/([^/\s]+)/([^/\s]+)/pull/(\d+)/?$')


def parse_pull_request_url(url: str) -> PullRequestRef:
    """Parse ``https://<host>/<owner>/<repo>/pull/<number>``."""
    match = PR_URL.match(url.strip())
    if not match:
        raise ValidationError(f"Not a pull request URL: {url}")
    host, owner, repo, number = match.groups()
    return PullRequestRef(owner=owner, repo=repo, number=int(number), host=host)


def parse_backport_command(text: str) -> Tuple[PullRequestRef, List[str]]:
    """
    Parse the chat form ``backport <pull-request-url> <branch> [<branch> ...]``.

    Returns:
        Tuple of (pull request reference, target branches in given order)
    """
    match = BACKPORT_COMMAND.match(text)
    if not match:
        raise ValidationError("Usage: backport <pull-request-url> <branches>")
    url, branches = match.groups()
    return parse_pull_request_url(url), branches.split()
