"""LLM Client Package"""

from git_pr_ai.llm.base import (
    LLMClient,
    LLMResponse,
    LLMError,
    SYSTEM_PROMPT,
    parse_numbered_output,
    validate_options,
    validate_not_empty,
)
from git_pr_ai.llm.claude import ClaudeClient
from git_pr_ai.llm.ollama import OllamaClient

PROVIDERS = {
    "claude": ClaudeClient,
    "ollama": OllamaClient,
}

AUTO_DETECT_ORDER = [OllamaClient, ClaudeClient]


def get_client(provider: str = "auto", model: str | None = None) -> LLMClient:
    """Get an LLM client. Provider can be 'claude', 'ollama', or 'auto'."""
    if provider in PROVIDERS:
        return PROVIDERS[provider](model=model)

    if provider == "auto":
        for client_class in AUTO_DETECT_ORDER:
            try:
                return client_class(model=model)
            except LLMError:
                continue

        raise LLMError(
            "No LLM provider available.\n\n"
            "Option 1 - Use Ollama (free, local):\n"
            "  1. Install: https://ollama.ai\n"
            "  2. Start: ollama serve\n"
            "  3. Pull: ollama pull llama3.2:3b\n\n"
            "Option 2 - Use Claude API:\n"
            "  export ANTHROPIC_API_KEY='your-key-here'"
        )

    raise LLMError(f"Unknown LLM provider: {provider}. Use 'claude', 'ollama', or 'auto'.")


__all__ = [
    "LLMClient",
    "LLMResponse",
    "LLMError",
    "ClaudeClient",
    "OllamaClient",
    "get_client",
    "PROVIDERS",
    "SYSTEM_PROMPT",
    "parse_numbered_output",
    "validate_options",
    "validate_not_empty",
]
