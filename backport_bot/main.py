#!/usr/bin/env python3
"""
Backport Bot - Main Entry Point

Backports a merged GitHub pull request onto one or more branches: every
target gets its own branch, commit, tracking issue and pull request.

Usage:
    python -m backport_bot.main backport https://github.com/owner/repo/pull/42 release-1.0 release-2.0
    python -m backport_bot.main command "backport https://github.com/owner/repo/pull/42 release-1.0"
"""

import argparse
import asyncio
import logging
import sys
from typing import List

from .backport import BackportOrchestrator
from .command import parse_backport_command, parse_pull_request_url
from .config import BackportConfig
from .errors import BackportError
from .models import BackportRun, PullRequestRef
from .tools import GitHubTool
from .utils import setup_logging, get_logger


async def run_backport(config: BackportConfig, ref: PullRequestRef, targets: List[str]) -> BackportRun:
    """
    Run a complete backport.

    Args:
        config: Backport configuration
        ref: Pull request to backport
        targets: Branches to backport onto

    Returns:
        The finished run
    """
    config.validate()

    github = GitHubTool(
        repo=ref.full_name,
        pr_number=ref.number,
        token=config.github_token,
        base_url=ref.api_url,
    )
    orchestrator = BackportOrchestrator(github, config)
    return await orchestrator.run(targets)


def build_config(args) -> BackportConfig:
    config = BackportConfig.from_env()
    if args.repos_dir:
        config.repos_dir = args.repos_dir
    if args.on_existing_branch:
        config.on_existing_branch = args.on_existing_branch
    return config


def execute(args, ref: PullRequestRef, targets: List[str]) -> int:
    logger = get_logger()
    config = build_config(args)

    logger.info(f"Backporting {ref.full_name}#{ref.number} to {', '.join(targets)}")
    try:
        run = asyncio.run(run_backport(config, ref, targets))
    except Exception as e:
        logger.exception(f"Backport failed: {e}")
        return 1

    print(run.report())
    return 0


def cmd_backport(args) -> int:
    """Handle 'backport' subcommand."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    try:
        ref = parse_pull_request_url(args.url)
    except BackportError as e:
        get_logger().error(str(e))
        return 1
    return execute(args, ref, args.branches)


def cmd_command(args) -> int:
    """Handle 'command' subcommand: the chat form of a backport request."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    try:
        ref, targets = parse_backport_command(args.text)
    except BackportError as e:
        get_logger().error(str(e))
        return 1
    return execute(args, ref, targets)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repos-dir",
        type=str,
        help="Directory holding the reusable checkouts (default: $BACKPORT_REPOS_DIR or ./repos)"
    )
    parser.add_argument(
        "--on-existing-branch",
        type=str,
        choices=["fail", "overwrite"],
        help="What to do when a backport branch already exists (default: fail)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Backport merged pull requests onto release branches"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    backport_parser = subparsers.add_parser("backport", help="Backport a pull request")
    backport_parser.add_argument(
        "url",
        help="Pull request URL, https://<host>/<owner>/<repo>/pull/<number>"
    )
    backport_parser.add_argument(
        "branches",
        nargs="+",
        help="Target branches"
    )
    add_common_arguments(backport_parser)

    command_parser = subparsers.add_parser(
        "command",
        help='Run a chat-style request: "backport <pr-url> <branches>"'
    )
    command_parser.add_argument("text", help="The full request text")
    add_common_arguments(command_parser)

    args = parser.parse_args(argv)

    if args.command == "backport":
        sys.exit(cmd_backport(args))
    elif args.command == "command":
        sys.exit(cmd_command(args))
    else:
        # No subcommand - show help
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
