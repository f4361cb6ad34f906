"""Provider Base Classes and Shared Data Model"""

import json
import logging
import os
import shlex
import subprocess
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from git_pr_ai.git import GitError

log = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when a hosting provider operation fails."""
    pass


class ProviderQueryError(ProviderError):
    """A hosting CLI call failed for a reason other than "not found".

    Auth failures, network errors and malformed responses all land here and
    are never reinterpreted as a missing PR.
    """

    def __init__(self, message: str, command: list[str] | None = None,
                 stderr: str = "", returncode: int | None = None):
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr
        self.returncode = returncode


class NotFoundError(ProviderError):
    """No PR/MR matched in the repositories that were searched."""

    def __init__(self, message: str, searched: list[str] | tuple[str, ...] = ()):
        super().__init__(message)
        self.searched = list(searched)


class InputFormatError(ProviderError, ValueError):
    """A PR identifier or URL could not be parsed."""
    pass


@dataclass(frozen=True)
class RepoRef:
    """One hosted repository. ``host`` is None for the provider's public host."""
    owner: str
    name: str
    full_name: str
    host: Optional[str] = None

    @classmethod
    def from_parts(cls, owner: str, name: str, host: str | None = None) -> 'RepoRef':
        return cls(owner=owner, name=name, full_name=f"{owner}/{name}", host=host)

    @classmethod
    def from_full_name(cls, full_name: str, host: str | None = None) -> Optional['RepoRef']:
        """Split ``owner/name`` (or ``group/sub/name``) on the last slash."""
        owner, sep, name = (full_name or '').strip('/').rpartition('/')
        if not sep or not owner or not name:
            return None
        return cls(owner=owner, name=name, full_name=f"{owner}/{name}", host=host)

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class RepoContext:
    """The repository a command runs in, plus its upstream when it is a fork."""
    current: RepoRef
    is_fork: bool = False
    parent: Optional[RepoRef] = None
    current_id: Optional[int] = None  # GitLab project id


@dataclass(frozen=True)
class PRReference:
    """Minimal identity of a located PR/MR: enough to target follow-up calls."""
    number: str
    url: str
    repo: RepoRef


@dataclass
class PRDetails:
    """Provider-neutral view of a PR/MR.

    ``owner`` and ``repo`` come from the repository that was queried, which in a
    fork is often not the working-directory repository.
    """
    number: str
    title: str
    url: str
    base_branch: str
    head_branch: str
    owner: str
    repo: str
    state: str
    author: str
    host: Optional[str] = None

    @property
    def repo_ref(self) -> RepoRef:
        return RepoRef.from_parts(self.owner, self.repo, host=self.host)


@dataclass
class PRSummary:
    number: str
    title: str
    url: str
    state: str
    author: str


@dataclass
class ReviewOptions:
    approve: bool = False
    request_changes: bool = False
    comment: Optional[str] = None


@dataclass
class IssueDetails:
    number: int
    title: str
    body: str = ""
    labels: list[str] = field(default_factory=list)
    assignee: Optional[str] = None
    milestone: Optional[str] = None


@dataclass
class TemplateInfo:
    exists: bool
    content: str = ""
    path: Optional[str] = None


def parent_ref(combined: str | None, owner: str | None, name: str | None) -> Optional[RepoRef]:
    """Normalize a repository given either ``owner/name`` or separate fields; the combined form wins."""
    if combined:
        ref = RepoRef.from_full_name(combined)
        if ref:
            return ref
    if owner and name:
        return RepoRef.from_parts(owner, name)
    return None


class CommandRunner:
    """Runs one hosting CLI (``gh``, ``glab``) and classifies its failures.

    With ``lookup=True`` a failure whose output matches one of
    ``not_found_markers`` becomes NotFoundError; every other failure is a
    ProviderQueryError.
    """

    def __init__(self, executable: str, not_found_markers: tuple[str, ...] = ()):
        self.executable = executable
        self.not_found_markers = tuple(m.lower() for m in not_found_markers)

    def run(self, *args: str, lookup: bool = False) -> str:
        command = [self.executable, *args]
        log.debug("$ %s", shlex.join(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
            )
        except FileNotFoundError:
            raise ProviderQueryError(f"{self.executable} is not installed or not in PATH", command=command)

        if result.returncode != 0:
            output = (result.stderr or result.stdout or '').strip()
            if lookup and self.is_not_found(output):
                log.debug("not found: %s", output)
                raise NotFoundError(output)
            raise ProviderQueryError(
                f"Command failed: {shlex.join(command)}\n{output}",
                command=command,
                stderr=output,
                returncode=result.returncode,
            )
        return result.stdout

    def run_json(self, *args: str, lookup: bool = False):
        output = self.run(*args, lookup=lookup)
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise ProviderQueryError(
                f"Malformed JSON from {self.executable} {' '.join(args[:2])}: {e}",
                command=[self.executable, *args],
            )

    def is_not_found(self, output: str) -> bool:
        lowered = output.lower()
        return any(marker in lowered for marker in self.not_found_markers)


@contextmanager
def body_file(content: str, suffix: str = '.md') -> Iterator[str]:
    """Write ``content`` to a temp file for ``--body-file`` style flags.

    The file is removed on exit, including when the command using it fails.
    """
    tmp = tempfile.NamedTemporaryFile(mode='w', suffix=suffix, delete=False, encoding='utf-8')
    try:
        tmp.write(content)
        tmp.close()
        yield tmp.name
    finally:
        tmp.close()
        try:
            os.unlink(tmp.name)
        except OSError as e:
            log.warning("Could not delete temp file %s: %s", tmp.name, e)


class GitProvider(ABC):
    """Capabilities every hosting provider exposes to the command layer.

    Review and issue operations are GitHub extensions; other providers inherit
    the defaults below, which raise ProviderError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def check_cli_available(self) -> None:
        pass

    @abstractmethod
    def get_default_branch(self) -> str:
        pass

    @abstractmethod
    def resolve_context(self) -> RepoContext:
        pass

    @abstractmethod
    def check_existing_pr(self) -> str | None:
        pass

    @abstractmethod
    def open_pr(self) -> str:
        pass

    @abstractmethod
    def create_pr(self, title: str, branch: str, base_branch: str, web: bool = True) -> str:
        pass

    @abstractmethod
    def get_pr_details(self, identifier: str | None = None) -> PRDetails:
        pass

    @abstractmethod
    def get_pr_diff(self, identifier: str | None = None) -> str:
        pass

    @abstractmethod
    def list_prs(self) -> list[PRSummary]:
        pass

    @abstractmethod
    def post_comment(self, content: str, identifier: str | None = None) -> PRReference:
        pass

    @abstractmethod
    def update_description(self, content: str, identifier: str | None = None) -> PRReference:
        pass

    @abstractmethod
    def find_pr_template(self) -> TemplateInfo:
        pass

    @abstractmethod
    def edit_command(self, details: PRDetails, body_path: str) -> str:
        """Shell command that replaces the body of ``details`` from ``body_path``."""
        pass

    def get_current_branch_pr(self) -> PRDetails | None:
        """Details of the open PR for the current branch, or None on any failure."""
        try:
            if not self.check_existing_pr():
                return None
            return self.get_pr_details()
        except (ProviderError, GitError) as e:
            log.debug("current branch PR lookup failed: %s", e)
            return None

    def review_pr(self, identifier: str, options: ReviewOptions) -> PRReference:
        raise ProviderError(f"Reviews are not supported for {self.name}")

    def get_issue(self, number: int) -> IssueDetails:
        raise ProviderError(f"Issues are not supported for {self.name}")

    def update_issue(self, number: int, title: str | None = None, body: str | None = None) -> None:
        raise ProviderError(f"Issues are not supported for {self.name}")

    def add_issue_comment(self, number: int, comment: str) -> None:
        raise ProviderError(f"Issues are not supported for {self.name}")

    def create_issue(self, title: str, body: str, labels: list[str] | None = None) -> str:
        raise ProviderError(f"Issues are not supported for {self.name}")
