"""LLM Base Classes and Shared Code"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional


SYSTEM_PROMPT = """You are a senior software engineer who writes precise git commit messages and pull request descriptions. You have reviewed thousands of pull requests at major tech companies and open-source projects.

Your expertise:
- Deep understanding of conventional commit format (type, scope, subject)
- Ability to identify the PRIMARY purpose of a change from a diff
- Writing for future developers who will read git log at 2am debugging production

Your standards:
- Every word earns its place. No filler, no fluff
- The diff shows WHAT; you explain WHY
- Specific verbs over vague ones (never "update", "change", "modify")
- Follow the requested output format exactly"""

_OPTION_RE = re.compile(r'^\s*[*_`]*OPTION[_ ]?(\d+)[*_`]*\s*[:\-]\s*[*_]*\s*(.+?)\s*$', re.IGNORECASE)

# (is_valid, error) for a raw response
Validator = Callable[[str], tuple[bool, str]]


def parse_numbered_output(content: str) -> list[str]:
    """Extract ``OPTION_N: message`` lines in option order, dropping duplicates."""
    found: dict[int, str] = {}
    for line in content.splitlines():
        match = _OPTION_RE.match(line)
        if not match:
            continue
        message = match.group(2).strip().strip('`"\'').strip()
        if message:
            found.setdefault(int(match.group(1)), message)

    options = []
    for _, message in sorted(found.items()):
        if message not in options:
            options.append(message)
    return options


def validate_options(content: str) -> tuple[bool, str]:
    """Validate that response contains at least one OPTION_N line."""
    if not content or len(content.strip()) < 10:
        return False, "Response too short"
    if not parse_numbered_output(content):
        first_line = content.strip().split('\n')[0]
        return False, f"Missing OPTION_1: format. Got: {first_line[:50]}"
    return True, ""


def validate_not_empty(content: str) -> tuple[bool, str]:
    if not content or not content.strip():
        return False, "Empty response"
    return True, ""


def retry_prompt(prompt: str, attempt: int, last_error: str) -> str:
    if attempt == 0:
        return prompt
    return f"{prompt}\n\nIMPORTANT: Your previous response was invalid ({last_error}). Follow the requested output format exactly."


@dataclass
class LLMResponse:
    """Structured response from any LLM provider."""
    content: str
    model: str = ""
    tokens_used: int = 0


class LLMError(Exception):
    """Raised when LLM operations fail."""
    pass


class LLMClient(ABC):
    """Abstract base for LLM clients."""

    @abstractmethod
    def generate(self, prompt: str, validator: Optional[Validator] = validate_options) -> LLMResponse:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass
