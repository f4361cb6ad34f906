"""Commit Prompt Builder - Ask the LLM for several numbered commit messages."""

from dataclasses import dataclass

from git_pr_ai import COMMIT_TYPES

# Longer diffs are truncated
MAX_DIFF_CHARS = 60_000

_OPTION_APPROACHES = [
    "Most concise and direct description",
    "Alternative wording with more context",
    "Most detailed description",
    "Emphasis on the user-visible impact",
    "Emphasis on the technical mechanism",
]


@dataclass
class CommitPromptConfig:
    """User-provided context that shapes the prompt."""
    commit_type: str = "feat"
    user_prompt: str | None = None
    num_options: int = 3
    max_subject_length: int = 72


class CommitPromptBuilder:
    """Constructs the prompt for ``git-pr-ai commit``."""

    def build(self, diff: str, config: CommitPromptConfig | None = None) -> str:
        config = config or CommitPromptConfig()
        sections = [
            self._build_diff_section(diff),
            self._build_context_section(config),
            f"Commit type selected: {config.commit_type}",
            self._build_options_section(config),
            self._build_requirements_section(config),
            self._build_format_section(config),
        ]
        return "\n\n".join(filter(None, sections)) + "\n"

    def _build_diff_section(self, diff: str) -> str:
        truncated = len(diff) > MAX_DIFF_CHARS
        if truncated:
            diff = diff[:MAX_DIFF_CHARS]
        section = f"Based on the following git diff, generate commit message options:\n\n{diff}"
        if truncated:
            section += "\n\n... [diff truncated due to size] ..."
        return section

    def _build_context_section(self, config: CommitPromptConfig) -> str:
        user_prompt = (config.user_prompt or '').strip()
        if not user_prompt:
            return ""
        return f"Additional context from user:\n{user_prompt}"

    def _build_options_section(self, config: CommitPromptConfig) -> str:
        n = config.num_options
        lines = [
            f"Please analyze the changes and provide {n} commit message options with different approaches:",
            f"1. {n} commit messages following the format: {{type}}: {{description}}",
        ]
        for i in range(n):
            approach = _OPTION_APPROACHES[i % len(_OPTION_APPROACHES)]
            lines.append(f"   - Option {i + 1}: {approach}")
        return "\n".join(lines)

    def _build_requirements_section(self, config: CommitPromptConfig) -> str:
        commit_type = config.commit_type
        description = COMMIT_TYPES.get(commit_type, "")
        type_line = f"- Use the selected commit type ({commit_type}) for all options"
        if description:
            type_line += f": {description.lower()}"
        return f"""Requirements:
{type_line}
- Keep the description clear and concise (max {config.max_subject_length} characters)
- Use imperative mood (e.g., "add feature" not "adds feature" or "added feature")
- Do not end the subject line with a period
- Provide {config.num_options} distinct options with different perspectives
- Focus on WHAT changed and WHY, not HOW"""

    def _build_format_section(self, config: CommitPromptConfig) -> str:
        commit_type = config.commit_type
        format_lines = "\n".join(
            f"OPTION_{i + 1}: {{commit_message_{i + 1}}}" for i in range(config.num_options)
        )
        return f"""Please respond with exactly this format:
{format_lines}

Examples:
OPTION_1: {commit_type}: add user authentication module
OPTION_2: {commit_type}: implement login and signup functionality
OPTION_3: {commit_type}: add JWT-based authentication system for users"""
