"""GitHub Provider - Fork-aware pull request operations over the gh CLI."""

import logging
import re
from pathlib import Path

from git_pr_ai.git import GitError, GitRepo
from git_pr_ai.providers.base import (
    CommandRunner,
    GitProvider,
    InputFormatError,
    IssueDetails,
    PRDetails,
    PRReference,
    PRSummary,
    ProviderError,
    ProviderQueryError,
    RepoContext,
    RepoRef,
    ReviewOptions,
    TemplateInfo,
    body_file,
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


class GitHubProvider(GitProvider):
    """GitHub via ``gh``. Every PR query and mutation passes an explicit ``--repo``."""

    DEFAULT_HOST = "github.com"
    CONTEXT_FIELDS = "nameWithOwner,owner,name,isFork,parent"
    LIST_FIELDS = "number,url,headRefName,headRepositoryOwner"
    VIEW_FIELDS = "number,title,url,baseRefName,headRefName,state,author"
    LIST_LIMIT = "100"

    # gh has no structured exit codes; these are the messages it prints for a missing PR
    NOT_FOUND_MARKERS = (
        "no pull requests found",
        "could not resolve to a pullrequest",
        "could not resolve to a pull request",
    )

    URL_PATTERN = re.compile(r'^https?://([^/]+)/([^/]+)/([^/]+)/pull/(\d+)(?:[/?#].*)?$')

    TEMPLATE_PATHS = [
        '.github/pull_request_template.md',
        '.github/PULL_REQUEST_TEMPLATE.md',
        '.github/pull_request_template/default.md',
    ]

    def __init__(self, git: GitRepo | None = None, runner: CommandRunner | None = None):
        self.git = git or GitRepo()
        self.gh = runner or CommandRunner('gh', self.NOT_FOUND_MARKERS)

    @property
    def name(self) -> str:
        return "GitHub"

    # -- repository context -------------------------------------------------

    def resolve_context(self) -> RepoContext:
        data = self.gh.run_json('repo', 'view', '--json', self.CONTEXT_FIELDS)
        try:
            current = RepoRef(
                owner=data['owner']['login'],
                name=data['name'],
                full_name=data['nameWithOwner'],
            )
            parent_data = data.get('parent') or {}
            parent = parent_ref(
                parent_data.get('nameWithOwner'),
                (parent_data.get('owner') or {}).get('login'),
                parent_data.get('name'),
            )
            is_fork = bool(data.get('isFork'))
        except (KeyError, TypeError, AttributeError) as e:
            raise ProviderQueryError(f"Unexpected response from gh repo view: missing {e}")

        log.debug("repo %s fork=%s parent=%s", current.full_name, is_fork, parent)
        return RepoContext(current=current, is_fork=is_fork, parent=parent)

    def _repo_arg(self, repo: RepoRef) -> str:
        return f"{repo.host}/{repo.full_name}" if repo.host else repo.full_name

    def parse_pr_url(self, url: str) -> PRReference:
        match = self.URL_PATTERN.match(url.strip())
        if not match:
            raise InputFormatError(
                "Invalid GitHub PR URL format. Expected: https://github.com/owner/repo/pull/123"
            )
        host, owner, name, number = match.groups()
        repo = RepoRef.from_parts(owner, name, host=None if host == self.DEFAULT_HOST else host)
        return PRReference(number=number, url=url.strip(), repo=repo)

    # -- lookup -------------------------------------------------------------

    def find_by_branch(self, repo: RepoRef, branch: str, context: RepoContext) -> PRReference | None:
        """Open PR in ``repo`` whose head is ``branch`` on the current owner's repository.

        ``gh pr list --head`` does not accept ``owner:branch`` and returns
        same-named branches from any fork, so the head owner is pinned here.
        """
        items = self.gh.run_json(
            'pr', 'list',
            '--state', 'open',
            '--repo', self._repo_arg(repo),
            '--head', branch,
            '--json', self.LIST_FIELDS,
            '--limit', self.LIST_LIMIT,
        )
        if items is None:
            return None
        if not isinstance(items, list):
            raise ProviderQueryError("Unexpected response from gh pr list: expected a list")
        owner = context.current.owner.lower()
        try:
            for item in items:
                head_owner = ((item.get('headRepositoryOwner') or {}).get('login') or '').lower()
                if item.get('headRefName') == branch and head_owner == owner:
                    return PRReference(number=str(item['number']), url=item['url'], repo=repo)
        except (KeyError, TypeError, AttributeError) as e:
            raise ProviderQueryError(f"Unexpected response from gh pr list: missing {e}")
        return None

    def find_branch_pr(self) -> BranchSearchResult:
        branch = self.git.current_branch()
        context = self.resolve_context()
        plan = SearchPlan.for_context(context, branch)
        return search_branch(plan, lambda repo, b: self.find_by_branch(repo, b, context))

    def view_pr(self, number: str, repo: RepoRef) -> PRDetails:
        data = self.gh.run_json(
            'pr', 'view', number,
            '--repo', self._repo_arg(repo),
            '--json', self.VIEW_FIELDS,
            lookup=True,
        )
        return self._to_details(data, repo)

    def _to_details(self, data: dict, repo: RepoRef) -> PRDetails:
        try:
            return PRDetails(
                number=str(data['number']),
                title=data.get('title', ''),
                url=data['url'],
                base_branch=data.get('baseRefName', ''),
                head_branch=data.get('headRefName', ''),
                owner=repo.owner,
                repo=repo.name,
                state=normalize_state(data.get('state')),
                author=(data.get('author') or {}).get('login', ''),
                host=repo.host,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ProviderQueryError(f"Unexpected response from gh pr view: missing {e}")

    def find_by_id_or_url(self, identifier: str, repo_hint: RepoRef | None = None) -> PRDetails:
        """Resolve a PR number or URL to details from the repository that holds it."""
        if is_url(identifier):
            ref = self.parse_pr_url(identifier)
            return self.view_pr(ref.number, ref.repo)

        number = parse_number(identifier)
        if repo_hint is not None:
            return self.view_pr(number, repo_hint)
        plan = SearchPlan.for_context(self.resolve_context())
        return search_by_id(number, plan, self.view_pr)

    def _reference(self, number: str, repo: RepoRef) -> PRReference:
        details = self.view_pr(number, repo)
        return PRReference(number=details.number, url=details.url, repo=repo)

    def resolve_target(self, identifier: str | None = None) -> PRReference:
        """The PR a mutation should act on: URL, bare number, or current branch."""
        if identifier:
            if is_url(identifier):
                return self.parse_pr_url(identifier)
            number = parse_number(identifier)
            plan = SearchPlan.for_context(self.resolve_context())
            return search_by_id(number, plan, self._reference)

        result = self.find_branch_pr()
        if result.pr is None:
            raise branch_not_found(result)
        return result.pr

    # -- facade -------------------------------------------------------------

    def check_cli_available(self) -> None:
        try:
            self.gh.run('--version')
        except ProviderQueryError:
            raise ProviderError(
                "Please install GitHub CLI (gh) first\n"
                "Installation: https://cli.github.com/"
            )

        try:
            self.gh.run('auth', 'status')
        except ProviderQueryError:
            try:
                self.gh.run('api', 'user')
            except ProviderQueryError:
                raise ProviderError(
                    "Please authenticate with GitHub CLI first\n"
                    "Run: gh auth login"
                )

    def get_default_branch(self) -> str:
        try:
            data = self.gh.run_json('repo', 'view', '--json', 'defaultBranchRef')
        except ProviderError as e:
            log.warning("Could not determine default branch via gh, falling back to 'main' (%s)", e)
            return 'main'
        branch_ref = data.get('defaultBranchRef') if isinstance(data, dict) else None
        if not isinstance(branch_ref, dict) or not branch_ref.get('name'):
            log.warning("Unexpected response from gh repo view, falling back to 'main'")
            return 'main'
        return branch_ref['name']

    def check_existing_pr(self) -> str | None:
        try:
            result = self.find_branch_pr()
        except (ProviderError, GitError) as e:
            log.debug("existing PR check failed: %s", e)
            return None
        return result.pr.url if result.pr else None

    def open_pr(self) -> str:
        result = self.find_branch_pr()
        if result.pr is None:
            raise branch_not_found(result)
        self.gh.run('pr', 'view', result.pr.url, '--web')
        return result.pr.url

    def create_pr(self, title: str, branch: str, base_branch: str, web: bool = True) -> str:
        """Open a PR against the upstream repository when running in a fork."""
        context = self.resolve_context()
        target = SearchPlan.for_context(context).repos[0]
        head = branch if target == context.current else f"{context.current.owner}:{branch}"

        args = [
            'pr', 'create',
            '--repo', self._repo_arg(target),
            '--title', title,
            '--base', base_branch,
            '--head', head,
        ]
        args += ['--web'] if web else ['--body', '']
        return self.gh.run(*args).strip()

    def get_pr_details(self, identifier: str | None = None) -> PRDetails:
        if identifier:
            return self.find_by_id_or_url(identifier)

        result = self.find_branch_pr()
        if result.pr is None:
            raise branch_not_found(result)
        return self.view_pr(result.pr.number, result.pr.repo)

    def get_pr_diff(self, identifier: str | None = None) -> str:
        target = self.resolve_target(identifier)
        return self.gh.run('pr', 'diff', target.number, '--repo', self._repo_arg(target.repo))

    def list_prs(self) -> list[PRSummary]:
        try:
            items = self.gh.run_json('pr', 'list', '--json', 'number,title,url,state,author')
            return [
                PRSummary(
                    number=str(item['number']),
                    title=item.get('title', ''),
                    url=item.get('url', ''),
                    state=normalize_state(item.get('state')),
                    author=(item.get('author') or {}).get('login', ''),
                )
                for item in items
            ]
        except ProviderError as e:
            log.warning("Could not list pull requests: %s", e)
        except (KeyError, TypeError, AttributeError) as e:
            log.warning("Could not list pull requests: unexpected response from gh pr list (%s)", e)
        return []

    def post_comment(self, content: str, identifier: str | None = None) -> PRReference:
        target = self.resolve_target(identifier)
        with body_file(content) as path:
            self.gh.run('pr', 'comment', target.number, '--repo', self._repo_arg(target.repo), '--body-file', path)
        return target

    def update_description(self, content: str, identifier: str | None = None) -> PRReference:
        target = self.resolve_target(identifier)
        with body_file(content) as path:
            self.gh.run('pr', 'edit', target.number, '--repo', self._repo_arg(target.repo), '--body-file', path)
        return target

    def edit_command(self, details: PRDetails, body_path: str) -> str:
        return f"gh pr edit {details.number} --repo {self._repo_arg(details.repo_ref)} --body-file {body_path}"

    def find_pr_template(self) -> TemplateInfo:
        for template_path in self.TEMPLATE_PATHS:
            path = Path(template_path)
            if path.is_file():
                return TemplateInfo(exists=True, content=path.read_text(encoding='utf-8'), path=template_path)
        return TemplateInfo(exists=False)

    def review_pr(self, identifier: str, options: ReviewOptions) -> PRReference:
        target = self.resolve_target(identifier)
        args = ['pr', 'review', target.number, '--repo', self._repo_arg(target.repo)]
        if options.approve:
            args.append('--approve')
        elif options.request_changes:
            args.append('--request-changes')
        else:
            args.append('--comment')
        if options.comment:
            args += ['--body', options.comment]
        self.gh.run(*args)
        return target

    # -- issues -------------------------------------------------------------

    def get_issue(self, number: int) -> IssueDetails:
        try:
            issue = self.gh.run_json(
                'issue', 'view', str(number),
                '--json', 'number,title,body,labels,assignees,milestone',
            )
        except ProviderError as e:
            raise ProviderError(
                f"Could not fetch issue #{number}. Make sure it exists and you have access to it."
            ) from e

        assignees = issue.get('assignees') or []
        return IssueDetails(
            number=issue['number'],
            title=issue.get('title', ''),
            body=issue.get('body') or '',
            labels=[label['name'] for label in issue.get('labels') or [] if label.get('name')],
            assignee=assignees[0].get('login') if assignees else None,
            milestone=(issue.get('milestone') or {}).get('title'),
        )

    def update_issue(self, number: int, title: str | None = None, body: str | None = None) -> None:
        if title is None and body is None:
            raise InputFormatError(f"Nothing to update on issue #{number}: pass a title or a body")
        args = ['issue', 'edit', str(number)]
        if title is not None:
            args += ['--title', title]
        if body is not None:
            args += ['--body', body]
        try:
            self.gh.run(*args)
        except ProviderError as e:
            raise ProviderError(f"Could not update issue: {e}") from e

    def add_issue_comment(self, number: int, comment: str) -> None:
        try:
            self.gh.run('issue', 'comment', str(number), '--body', comment)
        except ProviderError as e:
            raise ProviderError(f"Could not add comment: {e}") from e

    def create_issue(self, title: str, body: str, labels: list[str] | None = None) -> str:
        args = ['issue', 'create', '--title', title, '--body', body]
        if labels:
            args += ['--label', ','.join(labels)]
        try:
            return self.gh.run(*args).strip()
        except ProviderError as e:
            raise ProviderError(f"Could not create issue: {e}") from e
