"""
Tests for provider-agnostic search planning and lookup.

Run with:
    pytest tests/test_resolution.py -v
"""

import pytest

from git_pr_ai.providers import (
    InputFormatError,
    NotFoundError,
    PRReference,
    ProviderQueryError,
    RepoContext,
    RepoRef,
)
from git_pr_ai.providers.resolution import (
    SearchPlan,
    is_url,
    normalize_state,
    parse_number,
    plan_search,
    search_branch,
    search_by_id,
)

FORK = RepoRef.from_parts('alice', 'fork-repo')
PARENT = RepoRef.from_parts('org', 'main-repo')


class TestPlanSearch:

    def test_fork_searches_parent_first(self):
        context = RepoContext(current=FORK, is_fork=True, parent=PARENT)
        assert plan_search(context) == (PARENT, FORK)

    def test_non_fork(self):
        assert plan_search(RepoContext(current=PARENT)) == (PARENT,)

    def test_fork_without_parent(self):
        assert plan_search(RepoContext(current=FORK, is_fork=True)) == (FORK,)

    def test_searched_names(self):
        plan = SearchPlan.for_context(RepoContext(current=FORK, is_fork=True, parent=PARENT), 'b')
        assert plan.searched == ['org/main-repo', 'alice/fork-repo']
        assert plan.branch == 'b'


class TestSearchBranch:

    def test_stops_at_first_match(self):
        visited = []

        def find(repo, branch):
            visited.append(repo)
            return PRReference(number='1', url='u', repo=repo)

        plan = SearchPlan(repos=(PARENT, FORK), branch='b')
        result = search_branch(plan, find)

        assert result.pr.repo == PARENT
        assert visited == [PARENT]

    def test_no_match(self):
        plan = SearchPlan(repos=(PARENT, FORK), branch='b')
        result = search_branch(plan, lambda repo, branch: None)
        assert result.pr is None
        assert result.searched == ['org/main-repo', 'alice/fork-repo']

    def test_error_stops_search(self):
        visited = []

        def find(repo, branch):
            visited.append(repo)
            raise ProviderQueryError("rate limited")

        with pytest.raises(ProviderQueryError):
            search_branch(SearchPlan(repos=(PARENT, FORK), branch='b'), find)
        assert visited == [PARENT]


class TestSearchById:

    def test_not_found_moves_on(self):
        def view(number, repo):
            if repo == PARENT:
                raise NotFoundError("missing")
            return repo

        assert search_by_id('3', SearchPlan(repos=(PARENT, FORK)), view) == FORK

    def test_other_errors_propagate(self):
        visited = []

        def view(number, repo):
            visited.append(repo)
            raise ProviderQueryError("timeout")

        with pytest.raises(ProviderQueryError):
            search_by_id('3', SearchPlan(repos=(PARENT, FORK)), view)
        assert visited == [PARENT]

    def test_exhausted(self):
        def view(number, repo):
            raise NotFoundError("missing")

        with pytest.raises(NotFoundError) as exc_info:
            search_by_id('3', SearchPlan(repos=(PARENT, FORK)), view, kind="merge request")

        assert str(exc_info.value) == (
            'No merge request found for "3" in repositories: org/main-repo, alice/fork-repo'
        )
        assert exc_info.value.searched == ['org/main-repo', 'alice/fork-repo']


class TestIdentifiers:

    @pytest.mark.parametrize("identifier, expected", [
        ("42", "42"),
        ("#42", "42"),
        ("!42", "42"),
        (" 7 ", "7"),
    ])
    def test_parse_number(self, identifier, expected):
        assert parse_number(identifier) == expected

    @pytest.mark.parametrize("identifier", ["", "abc", "#", "1.5", "##1", "pull/1"])
    def test_parse_number_rejects(self, identifier):
        with pytest.raises(InputFormatError):
            parse_number(identifier)

    def test_is_url(self):
        assert is_url('https://github.com/o/r/pull/1')
        assert is_url('http://gitlab.local/o/r/-/merge_requests/1')
        assert not is_url('42')

    @pytest.mark.parametrize("raw, expected", [
        ("OPEN", "open"),
        ("opened", "open"),
        ("locked", "open"),
        ("MERGED", "merged"),
        ("merged", "merged"),
        ("CLOSED", "closed"),
        (None, "closed"),
    ])
    def test_normalize_state(self, raw, expected):
        assert normalize_state(raw) == expected
