"""CLI Argument Parsing"""

import argparse
import argcomplete

from git_pr_ai import COMMIT_TYPE_NAMES, __version__

PR_ARG_HELP = 'PR/MR number or URL (default: the open PR for the current branch)'


def _add_pr_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('pr', nargs='?', metavar='PR', help=PR_ARG_HELP)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='git-pr-ai',
        description='AI commit messages and fork-aware pull/merge request tools for GitHub and GitLab',
        epilog='Example: git-pr-ai commit "explain why the change was needed"'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-p', '--provider', type=str, choices=['auto', 'github', 'gitlab'], help='Hosting provider')
    parser.add_argument('--verbose', action='store_true', help='Show debug logging (commands run, repositories searched)')

    sub = parser.add_subparsers(dest='command', metavar='COMMAND')
    sub.required = True

    commit = sub.add_parser('commit', help='Generate commit message options for staged changes')
    commit.add_argument('prompt', nargs='?', help='Additional context to refine the suggestions')
    commit.add_argument('-t', '--type', type=str, choices=COMMIT_TYPE_NAMES, help='Commit type (asked interactively when omitted)')
    commit.add_argument('-n', '--num-options', type=int, metavar='N', help='Number of options to generate (2-5)')
    commit.add_argument('--llm', type=str, choices=['auto', 'ollama', 'claude'], help='LLM provider')
    commit.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')

    sub.add_parser('open', help='Open the PR for the current branch in the browser')

    create = sub.add_parser('create', help='Create a PR for the current branch')
    create.add_argument('title', help='PR title')
    create.add_argument('-b', '--base', type=str, metavar='BRANCH', help='Base branch (default: repository default branch)')
    create.add_argument('--no-web', action='store_true', help='Create without opening the browser')

    details = sub.add_parser('details', help='Show PR details')
    _add_pr_argument(details)

    diff = sub.add_parser('diff', help='Print the PR diff')
    _add_pr_argument(diff)

    sub.add_parser('list', help='List open PRs in the current repository')

    comment = sub.add_parser('comment', help='Post a comment on a PR')
    comment.add_argument('body', help='Comment text ("-" reads stdin)')
    _add_pr_argument(comment)

    update = sub.add_parser('update-desc', help='Generate and apply a new PR description')
    _add_pr_argument(update)
    update.add_argument('--llm', type=str, choices=['auto', 'ollama', 'claude'], help='LLM provider')
    update.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')
    update.add_argument('-y', '--yes', action='store_true', help='Apply without confirmation')

    review = sub.add_parser('review', help='Submit a PR review (GitHub)')
    review.add_argument('pr', metavar='PR', help='PR number or URL')
    verdict = review.add_mutually_exclusive_group()
    verdict.add_argument('--approve', action='store_true', help='Approve the PR')
    verdict.add_argument('--request-changes', action='store_true', help='Request changes')
    review.add_argument('-c', '--comment', type=str, metavar='TEXT', help='Review body')

    sub.add_parser('config', help='Show current configuration')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
