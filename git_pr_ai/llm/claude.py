"""Claude (Anthropic) LLM Client"""

import os
from typing import Optional

from git_pr_ai.llm.base import LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT, Validator, retry_prompt, validate_options


class ClaudeClient(LLMClient):
    """Claude API client. Requires ANTHROPIC_API_KEY env var."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 2000
    TEMPERATURE = 0.4
    MAX_RETRIES = 2

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.model = model or self.DEFAULT_MODEL

        if not self.api_key:
            raise LLMError(
                "No API key found. Set ANTHROPIC_API_KEY environment variable:\n"
                "  export ANTHROPIC_API_KEY='your-key-here'"
            )

        try:
            from anthropic import Anthropic
            self._client = Anthropic(api_key=self.api_key)
        except ImportError:
            raise LLMError(
                "Anthropic SDK not installed. Run:\n"
                "  pip install anthropic"
            )

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def generate(self, prompt: str, validator: Optional[Validator] = validate_options) -> LLMResponse:
        from anthropic import APIError, AuthenticationError

        last_error = ""
        for attempt in range(self.MAX_RETRIES + 1):
            try:
                response = self._client.messages.create(
                    model=self.model,
                    max_tokens=self.MAX_TOKENS,
                    temperature=self.TEMPERATURE,
                    system=SYSTEM_PROMPT,
                    messages=[{"role": "user", "content": retry_prompt(prompt, attempt, last_error)}]
                )
            except AuthenticationError:
                raise LLMError("Invalid API key. Check your ANTHROPIC_API_KEY.")
            except APIError as e:
                raise LLMError(f"Claude API error: {e.message}")

            content = ""
            for block in response.content:
                if block.type == "text":
                    content = block.text.strip()
                    break

            if validator is not None:
                is_valid, error = validator(content)
                if not is_valid:
                    last_error = error
                    if attempt < self.MAX_RETRIES:
                        continue
                    break

            return LLMResponse(
                content=content,
                model=self.model,
                tokens_used=response.usage.input_tokens + response.usage.output_tokens
            )

        raise LLMError(f"Failed after {self.MAX_RETRIES} retries: {last_error}")
