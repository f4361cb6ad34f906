"""Shared fixtures: a scripted stand-in for subprocess.run."""

import json
import subprocess

import pytest


class FakeCommands:
    """Answers ``subprocess.run`` calls from a table keyed by the joined argv.

    Unknown commands fail with exit code 1 so an unexpected call shows up as
    an error instead of silently succeeding.
    """

    def __init__(self):
        self.responses = {}
        self.prefixes = []
        self.calls = []
        self.body_files = {}
        self.missing = set()

    @staticmethod
    def _response(stdout, stderr, returncode):
        if not isinstance(stdout, str):
            stdout = json.dumps(stdout)
        return (returncode, stdout, stderr)

    def on(self, command, stdout='', stderr='', returncode=0):
        self.responses[command] = self._response(stdout, stderr, returncode)
        return self

    def on_prefix(self, prefix, stdout='', stderr='', returncode=0):
        """Answer any command starting with ``prefix`` (temp-file paths vary)."""
        self.prefixes.append((prefix, self._response(stdout, stderr, returncode)))
        return self

    def fail(self, command, stderr, returncode=1):
        return self.on(command, stderr=stderr, returncode=returncode)

    def ran(self, prefix):
        return [call for call in self.calls if call.startswith(prefix)]

    def __call__(self, args, **kwargs):
        command = ' '.join(args)
        self.calls.append(command)
        if args[0] in self.missing:
            raise FileNotFoundError(args[0])

        if '--body-file' in args:
            path = args[args.index('--body-file') + 1]
            with open(path, encoding='utf-8') as f:
                self.body_files[path] = f.read()

        response = self.responses.get(command)
        if response is None:
            response = next((r for p, r in self.prefixes if command.startswith(p)), None)
        returncode, stdout, stderr = response or (1, '', f"unexpected command: {command}")
        if kwargs.get('check') and returncode != 0:
            raise subprocess.CalledProcessError(returncode, args, output=stdout, stderr=stderr)
        return subprocess.CompletedProcess(args, returncode, stdout, stderr)


@pytest.fixture
def commands(monkeypatch):
    fake = FakeCommands()
    monkeypatch.setattr(subprocess, 'run', fake)
    return fake


GH_CONTEXT = 'gh repo view --json nameWithOwner,owner,name,isFork,parent'
GH_LIST_FIELDS = '--json number,url,headRefName,headRepositoryOwner --limit 100'
GH_VIEW_FIELDS = '--json number,title,url,baseRefName,headRefName,state,author'
GIT_BRANCH = 'git rev-parse --abbrev-ref HEAD'


def gh_list(repo, branch):
    return f'gh pr list --state open --repo {repo} --head {branch} {GH_LIST_FIELDS}'


def gh_view(number, repo):
    return f'gh pr view {number} --repo {repo} {GH_VIEW_FIELDS}'


def gh_repo(owner, name, parent=None):
    data = {
        'nameWithOwner': f'{owner}/{name}',
        'owner': {'login': owner},
        'name': name,
        'isFork': parent is not None,
        'parent': None,
    }
    if parent:
        parent_owner, parent_name = parent.split('/')
        data['parent'] = {'nameWithOwner': parent, 'owner': {'login': parent_owner}, 'name': parent_name}
    return data


def gh_pr(number, repo, branch='feat/fork-branch', state='OPEN', title='Add fork feature', author='alice'):
    return {
        'number': number,
        'title': title,
        'url': f'https://github.com/{repo}/pull/{number}',
        'baseRefName': 'main',
        'headRefName': branch,
        'state': state,
        'author': {'login': author},
    }


@pytest.fixture
def fork_repo(commands):
    """alice/fork-repo forked from org/main-repo, on branch feat/fork-branch."""
    commands.on(GIT_BRANCH, 'feat/fork-branch\n')
    commands.on(GH_CONTEXT, gh_repo('alice', 'fork-repo', parent='org/main-repo'))
    return commands


@pytest.fixture
def plain_repo(commands):
    """org/main-repo, not a fork, on branch feat/fork-branch."""
    commands.on(GIT_BRANCH, 'feat/fork-branch\n')
    commands.on(GH_CONTEXT, gh_repo('org', 'main-repo'))
    return commands
