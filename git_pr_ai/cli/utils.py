"""CLI Utility Functions"""

import sys

from git_pr_ai import COMMIT_TYPES, COMMIT_TYPE_NAMES
from git_pr_ai.output import bold, dim, info, colorize_commit_type, colorize_state
from git_pr_ai.providers import PRDetails, PRSummary


def _format_option(message: str, option_num: int) -> str:
    """Format a single option with colored type and clear visual hierarchy."""
    colored = colorize_commit_type(message)
    lines = colored.split('\n')

    parts = [f"{info(f'[{option_num}]')} {bold(lines[0])}"]
    for line in lines[1:]:
        if line.strip():
            parts.append(f"    {line}")
    return '\n'.join(parts)


def _ask_index(prompt: str, count: int) -> int | None:
    while True:
        try:
            choice = input(prompt).strip().lower()
        except (KeyboardInterrupt, EOFError):
            return None
        if choice == 'q':
            return None
        try:
            idx = int(choice) - 1
        except ValueError:
            idx = -1
        if 0 <= idx < count:
            return idx
        print(f"Enter 1-{count} or q")


def display_options(options: list[str]) -> int | None:
    """Show options and get selection. Returns the chosen index or None on quit."""
    print()
    for i, opt in enumerate(options, 1):
        print(_format_option(opt, i))
    print()
    return _ask_index(f"Select [1-{len(options)}] or (q)uit: ", len(options))


def select_commit_type() -> str | None:
    """Ask for a commit type from the conventional list."""
    print(f"\n{bold('Commit type:')}")
    for i, name in enumerate(COMMIT_TYPE_NAMES, 1):
        print(f"  {info(f'{i:>2}.')} {name:<9} {dim(COMMIT_TYPES[name])}")
    print()
    idx = _ask_index(f"Select [1-{len(COMMIT_TYPE_NAMES)}] or (q)uit: ", len(COMMIT_TYPE_NAMES))
    return None if idx is None else COMMIT_TYPE_NAMES[idx]


def confirm(prompt: str, default: bool = True) -> bool:
    suffix = "[Y/n]" if default else "[y/N]"
    try:
        answer = input(f"{prompt} {suffix}: ").strip().lower()
    except (KeyboardInterrupt, EOFError):
        return False
    if not answer:
        return default
    return answer in ('y', 'yes')


def read_body(text: str) -> str:
    """Return ``text``, or stdin when it is ``-``."""
    if text == '-':
        return sys.stdin.read()
    return text


def display_pr_details(details: PRDetails) -> None:
    print(f"\n{bold(f'#{details.number}')} {bold(details.title)}")
    print(f"  {dim('Repository:')} {details.owner}/{details.repo}")
    print(f"  {dim('Branch:')}     {details.head_branch} -> {details.base_branch}")
    print(f"  {dim('State:')}      {colorize_state(details.state)}")
    print(f"  {dim('Author:')}     {details.author}")
    print(f"  {dim('URL:')}        {info(details.url)}\n")


def display_pr_list(prs: list[PRSummary]) -> None:
    width = max((len(pr.number) for pr in prs), default=1) + 1
    for pr in prs:
        number = f"#{pr.number}".ljust(width)
        print(f"{info(number)}  {pr.title}  {dim(f'({pr.author})')}  {colorize_state(pr.state)}")
