"""PR Description Prompt - Rewrite a pull/merge request body from its diff."""

from git_pr_ai.providers import GitProvider, PRDetails, TemplateInfo
from git_pr_ai.prompts.commit import MAX_DIFF_CHARS

DESCRIPTION_FILE = "description.md"


def build_update_description_prompt(details: PRDetails, provider: GitProvider, diff: str = "",
                                    template: TemplateInfo | None = None) -> str:
    """Prompt for a new PR body. The embedded edit command always names the PR's own repository."""
    template = template or TemplateInfo(exists=False)
    edit_command = provider.edit_command(details, DESCRIPTION_FILE)

    sections = [
        f"Write a clear description for {provider.name} pull request #{details.number}: \"{details.title}\"",
        f"Repository: {details.owner}/{details.repo}\n"
        f"Branch: {details.head_branch} -> {details.base_branch}\n"
        f"URL: {details.url}",
    ]

    if template.exists:
        sections.append(
            f"Follow this template ({template.path}) and fill in every section:\n\n{template.content.strip()}"
        )
    else:
        sections.append(
            "Use these sections:\n"
            "## Summary\n"
            "## Changes\n"
            "## Testing"
        )

    if diff:
        body = diff[:MAX_DIFF_CHARS]
        if len(diff) > MAX_DIFF_CHARS:
            body += "\n\n... [diff truncated due to size] ..."
        sections.append(f"Changes in this pull request:\n\n{body}")

    sections.append(
        "Requirements:\n"
        "- Explain WHY the change was made, not just WHAT changed\n"
        "- Keep it skimmable: short paragraphs and bullet points\n"
        "- Respond with the Markdown description only, no preamble"
    )
    sections.append(
        f"If you are applying the description yourself, save it to {DESCRIPTION_FILE} and run:\n"
        f"  {edit_command}"
    )
    return "\n\n".join(sections) + "\n"
