"""CLI Main Entry Point"""

import logging
import sys

from git_pr_ai.config import load_config, resolve_settings, setup_logging
from git_pr_ai.git import GitError, GitRepo
from git_pr_ai.llm import LLMError
from git_pr_ai.output import dim, print_error
from git_pr_ai.providers import ProviderError, get_provider

from git_pr_ai.cli.args import parse_args
from git_pr_ai.cli import commands

log = logging.getLogger(__name__)


def _dispatch(args, config) -> int:
    if args.command == 'config':
        return commands.display_config(config)

    git = GitRepo()
    if args.command == 'commit':
        return commands.run_commit(args, config, git)

    provider_name, _, _ = resolve_settings(config, provider=args.provider)
    provider = get_provider(provider_name, git=git)
    log.debug("provider: %s", provider.name)
    provider.check_cli_available()

    if args.command == 'open':
        return commands.run_open(provider)
    if args.command == 'create':
        return commands.run_create(args, config, provider, git)
    if args.command == 'details':
        return commands.run_details(args, provider)
    if args.command == 'diff':
        return commands.run_diff(args, provider)
    if args.command == 'list':
        return commands.run_list(provider)
    if args.command == 'comment':
        return commands.run_comment(args, provider)
    if args.command == 'update-desc':
        return commands.run_update_description(args, config, provider)
    if args.command == 'review':
        return commands.run_review(args, provider)

    print_error(f"Unknown command: {args.command}")
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    setup_logging(args.verbose)
    config = load_config()

    try:
        return _dispatch(args, config)
    except (ProviderError, GitError, LLMError) as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print(dim("\nCancelled."))
        return 130


def run() -> None:
    sys.exit(main())
