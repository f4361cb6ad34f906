"""Hosting Provider Package"""

from urllib.parse import urlparse

from git_pr_ai.git import GitError, GitRepo
from git_pr_ai.providers.base import (
    GitProvider,
    InputFormatError,
    IssueDetails,
    NotFoundError,
    PRDetails,
    PRReference,
    PRSummary,
    ProviderError,
    ProviderQueryError,
    RepoContext,
    RepoRef,
    ReviewOptions,
    TemplateInfo,
)
from git_pr_ai.providers.github import GitHubProvider
from git_pr_ai.providers.gitlab import GitLabProvider
from git_pr_ai.providers.resolution import SearchPlan, plan_search

PROVIDERS = {
    "github": GitHubProvider,
    "gitlab": GitLabProvider,
}


def detect_provider_name(remote_url: str) -> str | None:
    """Guess the provider from a remote URL (https or scp-style ssh)."""
    if '://' in remote_url:
        host = urlparse(remote_url).hostname or ''
    else:
        # git@host:owner/repo.git
        host = remote_url.split('@', 1)[-1].split(':', 1)[0]
    host = host.lower()
    if 'gitlab' in host:
        return 'gitlab'
    if 'github' in host:
        return 'github'
    return None


def get_provider(provider: str = "auto", git: GitRepo | None = None) -> GitProvider:
    """Get a hosting provider. Provider can be 'github', 'gitlab', or 'auto'."""
    git = git or GitRepo()
    if provider in PROVIDERS:
        return PROVIDERS[provider](git=git)

    if provider == "auto":
        try:
            remote_url = git.remote_url()
        except GitError as e:
            raise ProviderError(f"Could not read the 'origin' remote: {e}")

        name = detect_provider_name(remote_url)
        if name is None:
            raise ProviderError(
                f"Could not detect hosting provider from remote {remote_url}.\n\n"
                "Set it explicitly:\n"
                "  git-pr-ai --provider github ...\n"
                "  or \"provider\": \"gitlab\" in .git-pr-ai.json"
            )
        return PROVIDERS[name](git=git)

    raise ProviderError(f"Unknown provider: {provider}. Use 'github', 'gitlab', or 'auto'.")


__all__ = [
    "GitProvider",
    "GitHubProvider",
    "GitLabProvider",
    "PROVIDERS",
    "get_provider",
    "detect_provider_name",
    "plan_search",
    "SearchPlan",
    "RepoRef",
    "RepoContext",
    "PRReference",
    "PRDetails",
    "PRSummary",
    "ReviewOptions",
    "IssueDetails",
    "TemplateInfo",
    "ProviderError",
    "ProviderQueryError",
    "NotFoundError",
    "InputFormatError",
]
