"""Prompt Construction Package"""

from git_pr_ai.prompts.commit import CommitPromptBuilder, CommitPromptConfig, MAX_DIFF_CHARS
from git_pr_ai.prompts.pr_description import build_update_description_prompt, DESCRIPTION_FILE

__all__ = [
    "CommitPromptBuilder",
    "CommitPromptConfig",
    "MAX_DIFF_CHARS",
    "build_update_description_prompt",
    "DESCRIPTION_FILE",
]
