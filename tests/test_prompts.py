"""
Tests for the commit and PR description prompts.

Run with:
    pytest tests/test_prompts.py -v
"""

import pytest

from git_pr_ai.prompts import (
    CommitPromptBuilder,
    CommitPromptConfig,
    MAX_DIFF_CHARS,
    build_update_description_prompt,
)
from git_pr_ai.providers import GitHubProvider, GitLabProvider, PRDetails, TemplateInfo

DIFF = """diff --git a/src/auth.py b/src/auth.py
+def login(user, password):
+    return check(user, password)
"""


class TestCommitPromptBuilder:

    @pytest.fixture
    def builder(self):
        return CommitPromptBuilder()

    def test_contains_diff(self, builder):
        prompt = builder.build(DIFF)
        assert "def login(user, password)" in prompt

    def test_selected_type(self, builder):
        prompt = builder.build(DIFF, CommitPromptConfig(commit_type="fix"))
        assert "Commit type selected: fix" in prompt
        assert "Use the selected commit type (fix) for all options" in prompt
        assert "OPTION_1: fix:" in prompt

    def test_user_prompt_included(self, builder):
        prompt = builder.build(DIFF, CommitPromptConfig(user_prompt="login was flaky on mobile"))
        assert "Additional context from user:\nlogin was flaky on mobile" in prompt

    def test_blank_user_prompt_excluded(self, builder):
        prompt = builder.build(DIFF, CommitPromptConfig(user_prompt="   "))
        assert "Additional context" not in prompt

    def test_option_count(self, builder):
        prompt = builder.build(DIFF, CommitPromptConfig(num_options=5))
        assert "OPTION_5: {commit_message_5}" in prompt
        assert "OPTION_6" not in prompt
        assert "provide 5 commit message options" in prompt

    def test_subject_length(self, builder):
        prompt = builder.build(DIFF, CommitPromptConfig(max_subject_length=50))
        assert "max 50 characters" in prompt

    def test_truncates_large_diff(self, builder):
        prompt = builder.build("+" * (MAX_DIFF_CHARS + 100))
        assert "[diff truncated due to size]" in prompt
        assert "+" * (MAX_DIFF_CHARS + 1) not in prompt


class TestUpdateDescriptionPrompt:

    @pytest.fixture
    def details(self):
        return PRDetails(
            number='42',
            title='Add fork feature',
            url='https://github.com/org/main-repo/pull/42',
            base_branch='main',
            head_branch='feat/fork-branch',
            owner='org',
            repo='main-repo',
            state='open',
            author='alice',
        )

    def test_edit_command_names_pr_repository(self, details):
        prompt = build_update_description_prompt(details, GitHubProvider())
        assert "gh pr edit 42 --repo org/main-repo --body-file description.md" in prompt
        assert "alice/fork-repo" not in prompt

    def test_gitlab_edit_command(self, details):
        prompt = build_update_description_prompt(details, GitLabProvider())
        assert 'glab mr update 42 --repo org/main-repo --description "$(cat description.md)"' in prompt

    def test_template_used(self, details):
        template = TemplateInfo(exists=True, content="## What\n## Why\n", path=".github/pull_request_template.md")
        prompt = build_update_description_prompt(details, GitHubProvider(), template=template)
        assert "## What\n## Why" in prompt
        assert ".github/pull_request_template.md" in prompt
        assert "## Testing" not in prompt

    def test_default_sections_without_template(self, details):
        prompt = build_update_description_prompt(details, GitHubProvider())
        assert "## Summary" in prompt

    def test_includes_diff(self, details):
        prompt = build_update_description_prompt(details, GitHubProvider(), diff=DIFF)
        assert "def login(user, password)" in prompt
        assert "feat/fork-branch -> main" in prompt
