"""Git Repository - Local branch, diff and commit operations."""

import logging
import subprocess

log = logging.getLogger(__name__)


class GitError(Exception):
    """Raised when git operations fail."""
    pass


class GitRepo:
    """Thin wrapper over the git CLI for the working-directory repository."""

    def __init__(self, cwd: str | None = None):
        self.cwd = cwd

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        log.debug("$ git %s", ' '.join(args))
        try:
            result = subprocess.run(
                ['git', *args],
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace',
                cwd=self.cwd,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def verify(self) -> None:
        """Fail fast if git is missing or we're not inside a repository."""
        self._run_git('--version')
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not inside a git repository")

    def current_branch(self) -> str:
        branch = self._run_git('rev-parse', '--abbrev-ref', 'HEAD').strip()
        if not branch or branch == 'HEAD':
            raise GitError("Detached HEAD: check out a branch first")
        return branch

    def staged_diff(self) -> str:
        return self._run_git('diff', '--cached').strip()

    def has_staged_changes(self) -> bool:
        # --quiet exits 1 when there are differences
        try:
            result = subprocess.run(
                ['git', 'diff', '--cached', '--quiet'],
                capture_output=True,
                cwd=self.cwd,
            )
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")
        return result.returncode != 0

    def remote_url(self, remote: str = 'origin') -> str:
        return self._run_git('remote', 'get-url', remote).strip()

    def commit(self, message: str) -> None:
        """Create the commit with the terminal attached so hooks can prompt."""
        log.debug("$ git commit -m <%d chars>", len(message))
        try:
            subprocess.run(['git', 'commit', '-m', message], check=True, cwd=self.cwd)
        except subprocess.CalledProcessError as e:
            raise GitError(f"git commit failed with exit code {e.returncode}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")
