"""Git Operations Package"""

from git_pr_ai.git.repo import GitRepo, GitError

__all__ = [
    "GitRepo",
    "GitError",
]
