"""PR/MR Resolution - Search planning and cross-repository lookup.

Provider-agnostic: providers pass in the per-repository query and this module
decides which repositories to ask, in which order, and when to stop.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from git_pr_ai.providers.base import (
    InputFormatError,
    NotFoundError,
    PRReference,
    RepoContext,
    RepoRef,
)

log = logging.getLogger(__name__)

T = TypeVar('T')

_NUMBER_RE = re.compile(r'^[#!]?(\d+)$')


def plan_search(context: RepoContext) -> tuple[RepoRef, ...]:
    """Repositories to query: ``(parent, current)`` for a fork, else ``(current,)``."""
    if context.is_fork and context.parent:
        return (context.parent, context.current)
    return (context.current,)


@dataclass(frozen=True)
class SearchPlan:
    repos: tuple[RepoRef, ...]
    branch: Optional[str] = None

    @classmethod
    def for_context(cls, context: RepoContext, branch: str | None = None) -> 'SearchPlan':
        return cls(repos=plan_search(context), branch=branch)

    @property
    def searched(self) -> list[str]:
        return [repo.full_name for repo in self.repos]


@dataclass
class BranchSearchResult:
    pr: Optional[PRReference]
    branch: str
    searched: list[str]


def search_branch(plan: SearchPlan,
                  find: Callable[[RepoRef, str], Optional[PRReference]]) -> BranchSearchResult:
    """Return the first PR found for ``plan.branch`` in plan order."""
    for repo in plan.repos:
        log.debug("looking for branch %s in %s", plan.branch, repo.full_name)
        pr = find(repo, plan.branch)
        if pr is not None:
            log.debug("found #%s in %s", pr.number, repo.full_name)
            return BranchSearchResult(pr=pr, branch=plan.branch, searched=plan.searched)
    return BranchSearchResult(pr=None, branch=plan.branch, searched=plan.searched)


def search_by_id(number: str, plan: SearchPlan, view: Callable[[str, RepoRef], T],
                 kind: str = "pull request") -> T:
    """Try ``view`` against each planned repository until one has ``number``.

    Only NotFoundError moves on to the next candidate. Anything else (auth,
    network, rate limit) propagates from the repository that raised it.
    """
    for repo in plan.repos:
        try:
            return view(number, repo)
        except NotFoundError:
            log.debug("%s %s not in %s", kind, number, repo.full_name)
            continue

    raise NotFoundError(
        f'No {kind} found for "{number}" in repositories: {", ".join(plan.searched)}',
        searched=plan.searched,
    )


def branch_not_found(result: BranchSearchResult, kind: str = "pull request") -> NotFoundError:
    return NotFoundError(
        f'No open {kind} found for branch "{result.branch}" in repositories: {", ".join(result.searched)}',
        searched=result.searched,
    )


def is_url(identifier: str) -> bool:
    return identifier.startswith(('http://', 'https://'))


def parse_number(identifier: str, kind: str = "pull request") -> str:
    """Accept ``42``, ``#42`` or ``!42``; anything else is rejected before a remote call."""
    match = _NUMBER_RE.match(identifier.strip())
    if not match:
        raise InputFormatError(f'Invalid {kind} identifier "{identifier}". Use a number or a full URL.')
    return match.group(1)


def normalize_state(raw: str | None) -> str:
    """Map GitHub (OPEN/CLOSED/MERGED) and GitLab (opened/closed/merged/locked) states."""
    state = (raw or '').lower()
    if state in ('open', 'opened', 'locked'):
        return 'open'
    if state == 'merged':
        return 'merged'
    return 'closed'
