"""GitLab Provider - Fork-aware merge request operations over the glab CLI."""

import logging
import re
from pathlib import Path

from git_pr_ai.git import GitError, GitRepo
from git_pr_ai.providers.base import (
    CommandRunner,
    GitProvider,
    InputFormatError,
    PRDetails,
    PRReference,
    PRSummary,
    ProviderError,
    ProviderQueryError,
    RepoContext,
    RepoRef,
    TemplateInfo,
    parent_ref,
)
from git_pr_ai.providers.resolution import (
    BranchSearchResult,
    SearchPlan,
    branch_not_found,
    is_url,
    normalize_state,
    parse_number,
    search_branch,
    search_by_id,
)

log = logging.getLogger(__name__)

KIND = "merge request"


def _project_ref(data: dict) -> RepoRef | None:
    """RepoRef from a GitLab project payload (``path_with_namespace`` or namespace + path)."""
    namespace = data.get('namespace') or {}
    return parent_ref(
        data.get('path_with_namespace'),
        namespace.get('full_path') or namespace.get('path'),
        data.get('path') or data.get('name'),
    )


class GitLabProvider(GitProvider):
    """GitLab via ``glab``. Project paths may contain nested groups."""

    DEFAULT_HOST = "gitlab.com"

    NOT_FOUND_MARKERS = (
        "404 not found",
        "404 merge request not found",
        "no merge requests",
    )

    URL_PATTERN = re.compile(r'^https?://([^/]+)/(.+?)/(?:-/)?merge_requests/(\d+)(?:[/?#].*)?$')

    TEMPLATE_PATHS = [
        '.gitlab/merge_request_templates/Default.md',
        '.gitlab/merge_request_templates/default.md',
    ]

    def __init__(self, git: GitRepo | None = None, runner: CommandRunner | None = None):
        self.git = git or GitRepo()
        self.glab = runner or CommandRunner('glab', self.NOT_FOUND_MARKERS)

    @property
    def name(self) -> str:
        return "GitLab"

    def resolve_context(self) -> RepoContext:
        data = self.glab.run_json('repo', 'view', '-F', 'json')
        if not isinstance(data, dict):
            raise ProviderQueryError("Unexpected response from glab repo view")

        current = _project_ref(data)
        if current is None:
            raise ProviderQueryError("Unexpected response from glab repo view: missing project path")

        forked_from = data.get('forked_from_project') or {}
        parent = _project_ref(forked_from) if forked_from else None

        log.debug("project %s fork=%s parent=%s", current.full_name, bool(forked_from), parent)
        return RepoContext(
            current=current,
            is_fork=bool(forked_from),
            parent=parent,
            current_id=data.get('id'),
        )

    def _repo_arg(self, repo: RepoRef) -> str:
        return f"https://{repo.host}/{repo.full_name}" if repo.host else repo.full_name

    def parse_mr_url(self, url: str) -> PRReference:
        match = self.URL_PATTERN.match(url.strip())
        repo = None
        if match:
            host, path, number = match.groups()
            repo = RepoRef.from_full_name(path, host=None if host == self.DEFAULT_HOST else host)
        if repo is None:
            raise InputFormatError(
                "Invalid GitLab MR URL format. Expected: https://gitlab.com/group/project/-/merge_requests/123"
            )
        return PRReference(number=number, url=url.strip(), repo=repo)

    def find_by_branch(self, repo: RepoRef, branch: str, context: RepoContext) -> PRReference | None:
        """Open MR in ``repo`` from ``branch`` of the current project.

        The source-branch filter matches MRs from every fork, so results are
        pinned to the current project id when GitLab reports one.
        """
        items = self.glab.run_json(
            'mr', 'list',
            '--repo', self._repo_arg(repo),
            '--source-branch', branch,
            '-F', 'json',
        )
        if items is None:
            return None
        if not isinstance(items, list):
            raise ProviderQueryError("Unexpected response from glab mr list: expected a list")
        try:
            for item in items:
                if item.get('source_branch') != branch:
                    continue
                source_id = item.get('source_project_id')
                if context.current_id is not None and source_id is not None and source_id != context.current_id:
                    continue
                return PRReference(number=str(item['iid']), url=item['web_url'], repo=repo)
        except (KeyError, TypeError, AttributeError) as e:
            raise ProviderQueryError(f"Unexpected response from glab mr list: missing {e}")
        return None

    def find_branch_pr(self) -> BranchSearchResult:
        branch = self.git.current_branch()
        context = self.resolve_context()
        plan = SearchPlan.for_context(context, branch)
        return search_branch(plan, lambda repo, b: self.find_by_branch(repo, b, context))

    def view_mr(self, iid: str, repo: RepoRef) -> PRDetails:
        data = self.glab.run_json('mr', 'view', iid, '--repo', self._repo_arg(repo), '-F', 'json', lookup=True)
        try:
            return PRDetails(
                number=str(data['iid']),
                title=data.get('title', ''),
                url=data['web_url'],
                base_branch=data.get('target_branch', ''),
                head_branch=data.get('source_branch', ''),
                owner=repo.owner,
                repo=repo.name,
                state=normalize_state(data.get('state')),
                author=(data.get('author') or {}).get('username', ''),
                host=repo.host,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ProviderQueryError(f"Unexpected response from glab mr view: missing {e}")

    def find_by_id_or_url(self, identifier: str, repo_hint: RepoRef | None = None) -> PRDetails:
        if is_url(identifier):
            ref = self.parse_mr_url(identifier)
            return self.view_mr(ref.number, ref.repo)

        iid = parse_number(identifier, KIND)
        if repo_hint is not None:
            return self.view_mr(iid, repo_hint)
        plan = SearchPlan.for_context(self.resolve_context())
        return search_by_id(iid, plan, self.view_mr, KIND)

    def resolve_target(self, identifier: str | None = None) -> PRReference:
        if identifier:
            if is_url(identifier):
                return self.parse_mr_url(identifier)
            details = self.find_by_id_or_url(identifier)
            return PRReference(number=details.number, url=details.url, repo=details.repo_ref)

        result = self.find_branch_pr()
        if result.pr is None:
            raise branch_not_found(result, KIND)
        return result.pr

    def check_cli_available(self) -> None:
        try:
            self.glab.run('--version')
        except ProviderQueryError:
            raise ProviderError(
                "Please install GitLab CLI (glab) first\n"
                "Installation: https://gitlab.com/gitlab-org/cli#installation"
            )
        try:
            self.glab.run('auth', 'status')
        except ProviderQueryError:
            raise ProviderError(
                "Please authenticate with GitLab CLI first\n"
                "Run: glab auth login"
            )

    def get_default_branch(self) -> str:
        try:
            data = self.glab.run_json('repo', 'view', '-F', 'json')
        except ProviderError as e:
            log.warning("Could not determine default branch via glab, falling back to 'main' (%s)", e)
            return 'main'
        branch = data.get('default_branch') if isinstance(data, dict) else None
        if not isinstance(branch, str) or not branch:
            log.warning("Unexpected response from glab repo view, falling back to 'main'")
            return 'main'
        return branch

    def check_existing_pr(self) -> str | None:
        try:
            result = self.find_branch_pr()
        except (ProviderError, GitError) as e:
            log.debug("existing MR check failed: %s", e)
            return None
        return result.pr.url if result.pr else None

    def open_pr(self) -> str:
        result = self.find_branch_pr()
        if result.pr is None:
            raise branch_not_found(result, KIND)
        self.glab.run('mr', 'view', result.pr.number, '--repo', self._repo_arg(result.pr.repo), '--web')
        return result.pr.url

    def create_pr(self, title: str, branch: str, base_branch: str, web: bool = True) -> str:
        """Create the MR without ``--repo`` so glab picks the target project from the remotes."""
        args = [
            'mr', 'create',
            '--title', title,
            '--target-branch', base_branch,
            '--source-branch', branch,
            '--description', '',
        ]
        if web:
            args.append('--web')
        else:
            args.append('--yes')
        return self.glab.run(*args).strip()

    def get_pr_details(self, identifier: str | None = None) -> PRDetails:
        if identifier:
            return self.find_by_id_or_url(identifier)

        result = self.find_branch_pr()
        if result.pr is None:
            raise branch_not_found(result, KIND)
        return self.view_mr(result.pr.number, result.pr.repo)

    def get_pr_diff(self, identifier: str | None = None) -> str:
        target = self.resolve_target(identifier)
        return self.glab.run('mr', 'diff', target.number, '--repo', self._repo_arg(target.repo))

    def list_prs(self) -> list[PRSummary]:
        try:
            items = self.glab.run_json('mr', 'list', '-F', 'json')
            return [
                PRSummary(
                    number=str(item['iid']),
                    title=item.get('title', ''),
                    url=item.get('web_url', ''),
                    state=normalize_state(item.get('state')),
                    author=(item.get('author') or {}).get('username', ''),
                )
                for item in items
            ]
        except ProviderError as e:
            log.warning("Could not list merge requests: %s", e)
        except (KeyError, TypeError, AttributeError) as e:
            log.warning("Could not list merge requests: unexpected response from glab mr list (%s)", e)
        return []

    # glab has no --body-file; bodies go inline as a single argv entry

    def post_comment(self, content: str, identifier: str | None = None) -> PRReference:
        target = self.resolve_target(identifier)
        self.glab.run('mr', 'note', target.number, '--repo', self._repo_arg(target.repo), '--message', content)
        return target

    def update_description(self, content: str, identifier: str | None = None) -> PRReference:
        target = self.resolve_target(identifier)
        self.glab.run('mr', 'update', target.number, '--repo', self._repo_arg(target.repo), '--description', content)
        return target

    def edit_command(self, details: PRDetails, body_path: str) -> str:
        return (
            f'glab mr update {details.number} --repo {self._repo_arg(details.repo_ref)} '
            f'--description "$(cat {body_path})"'
        )

    def find_pr_template(self) -> TemplateInfo:
        for template_path in self.TEMPLATE_PATHS:
            path = Path(template_path)
            if path.is_file():
                return TemplateInfo(exists=True, content=path.read_text(encoding='utf-8'), path=template_path)
        return TemplateInfo(exists=False)
