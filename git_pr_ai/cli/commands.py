"""CLI Commands"""

import argparse
import os

from git_pr_ai.config import Config, get_config_path, resolve_settings
from git_pr_ai.git import GitRepo
from git_pr_ai.llm import get_client, parse_numbered_output, validate_not_empty
from git_pr_ai.output import Spinner, bold, dim, info, print_error, print_success, print_warning
from git_pr_ai.prompts import CommitPromptBuilder, CommitPromptConfig, build_update_description_prompt
from git_pr_ai.providers import GitProvider, ReviewOptions

from git_pr_ai.cli.utils import (
    confirm,
    display_options,
    display_pr_details,
    display_pr_list,
    read_body,
    select_commit_type,
)


def run_commit(args: argparse.Namespace, config: Config, git: GitRepo) -> int:
    """Generate commit message options for the staged diff and commit the chosen one."""
    git.verify()
    if not git.has_staged_changes():
        print_error("No staged changes. Run 'git add' first.")
        return 1

    commit_type = args.type or select_commit_type()
    if commit_type is None:
        print(dim("Cancelled."))
        return 0

    num_options = args.num_options or config.num_options
    prompt = CommitPromptBuilder().build(git.staged_diff(), CommitPromptConfig(
        commit_type=commit_type,
        user_prompt=args.prompt,
        num_options=num_options,
        max_subject_length=config.max_subject_length,
    ))

    _, llm, model = resolve_settings(config, llm=args.llm, model=args.model)
    client = get_client(provider=llm, model=model)
    with Spinner(f"Generating commit messages with {client.name}") as spinner:
        response = client.generate(prompt)
        spinner.succeed(f"Generated with {client.name}")

    options = parse_numbered_output(response.content)
    idx = display_options(options)
    if idx is None:
        print(dim("Cancelled."))
        return 0

    git.commit(options[idx])
    print_success("Committed")
    return 0


def run_open(provider: GitProvider) -> int:
    with Spinner("Looking for an open PR") as spinner:
        url = provider.open_pr()
        spinner.succeed(f"Opened {url}")
    return 0


def run_create(args: argparse.Namespace, config: Config, provider: GitProvider, git: GitRepo) -> int:
    branch = git.current_branch()
    existing = provider.check_existing_pr()
    if existing:
        print_warning(f"A PR already exists for {branch}: {existing}")
        return 1

    base = args.base or provider.get_default_branch()
    web = config.web and not args.no_web
    url = provider.create_pr(args.title, branch, base, web=web)
    print_success(f"Created PR for {branch} -> {base}" + (f": {url}" if url else ""))
    return 0


def run_details(args: argparse.Namespace, provider: GitProvider) -> int:
    display_pr_details(provider.get_pr_details(args.pr))
    return 0


def run_diff(args: argparse.Namespace, provider: GitProvider) -> int:
    print(provider.get_pr_diff(args.pr), end='')
    return 0


def run_list(provider: GitProvider) -> int:
    prs = provider.list_prs()
    if not prs:
        print(dim("No open pull requests."))
        return 0
    display_pr_list(prs)
    return 0


def run_comment(args: argparse.Namespace, provider: GitProvider) -> int:
    body = read_body(args.body)
    if not body.strip():
        print_error("Comment is empty")
        return 1
    target = provider.post_comment(body, args.pr)
    print_success(f"Commented on {target.url}")
    return 0


def run_update_description(args: argparse.Namespace, config: Config, provider: GitProvider) -> int:
    """Rewrite a PR description with the LLM and apply it to the PR's own repository."""
    details = provider.get_pr_details(args.pr)
    diff = provider.get_pr_diff(details.url)
    template = provider.find_pr_template()
    prompt = build_update_description_prompt(details, provider, diff=diff, template=template)

    _, llm, model = resolve_settings(config, llm=args.llm, model=args.model)
    client = get_client(provider=llm, model=model)
    with Spinner(f"Writing description with {client.name}") as spinner:
        response = client.generate(prompt, validator=validate_not_empty)
        spinner.succeed("Description ready")

    description = response.content.strip()
    print(f"\n{description}\n")
    if not args.yes and not confirm(f"Update {bold(f'#{details.number}')} in {details.owner}/{details.repo}?"):
        print(dim("Cancelled."))
        return 0

    # URL pins the mutation to the repository the details came from
    target = provider.update_description(description, details.url)
    print_success(f"Updated description of {target.url}")
    return 0


def run_review(args: argparse.Namespace, provider: GitProvider) -> int:
    options = ReviewOptions(
        approve=args.approve,
        request_changes=args.request_changes,
        comment=read_body(args.comment) if args.comment else None,
    )
    if options.request_changes and not options.comment:
        print_error("--request-changes needs a --comment")
        return 1
    target = provider.review_pr(args.pr, options)
    print_success(f"Reviewed {target.url}")
    return 0


def display_config(config: Config) -> int:
    """Display current configuration."""
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")
    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .git-pr-ai.json found)")

    overrides = {k: os.environ[k] for k in ('GPA_PROVIDER', 'GPA_LLM', 'GPA_MODEL') if os.environ.get(k)}
    if overrides:
        print(f"  {dim('Environment overrides:')}")
        for key, value in overrides.items():
            print(f"    {key}={value}")

    print()
    print(f"  {bold('Settings:')}")
    print(f"    provider:           {info(config.provider)}")
    print(f"    llm:                {info(config.llm)}")
    print(f"    model:              {info(config.model or 'auto')}")
    print(f"    num_options:        {info(str(config.num_options))}")
    print(f"    max_subject_length: {info(str(config.max_subject_length))}")
    print(f"    web:                {info(str(config.web).lower())}")

    print(f"\n  {dim('Config locations:')}")
    print("    Local:  .git-pr-ai.json (in current directory)")
    print("    Global: ~/.git-pr-ai.json\n")
    return 0
