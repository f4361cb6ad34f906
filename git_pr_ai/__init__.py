"""
Git PR AI

AI-powered commit messages and fork-aware pull/merge request tooling
for GitHub and GitLab.
"""

__version__ = "1.0.0"

# Centralized commit types - single source of truth
# Used by: prompts/commit.py, cli/args.py (argparse), cli/commands.py (type menu)
COMMIT_TYPES = {
    'feat': 'New features',
    'fix': 'Bug fixes',
    'docs': 'Documentation changes',
    'style': 'Formatting changes',
    'refactor': 'Code refactoring',
    'perf': 'Performance improvements',
    'test': 'Adding/updating tests',
    'chore': 'Maintenance tasks',
    'ci': 'CI/CD changes',
    'build': 'Build system changes',
}

# List of type names for validation and argparse
COMMIT_TYPE_NAMES = list(COMMIT_TYPES.keys())
