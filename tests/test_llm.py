"""
Tests for LLM output parsing, validation and the client retry loop.

Run with:
    pytest tests/test_llm.py -v
"""

from types import SimpleNamespace

import pytest

from git_pr_ai.llm import (
    ClaudeClient,
    LLMError,
    OllamaClient,
    get_client,
    parse_numbered_output,
    validate_not_empty,
    validate_options,
)
from git_pr_ai.llm.base import retry_prompt


class TestParseNumberedOutput:

    def test_basic(self):
        content = (
            "OPTION_1: feat: add login\n"
            "OPTION_2: feat: add login and signup\n"
            "OPTION_3: feat: add JWT auth\n"
        )
        assert parse_numbered_output(content) == [
            "feat: add login",
            "feat: add login and signup",
            "feat: add JWT auth",
        ]

    def test_ignores_preamble_and_markdown(self):
        content = (
            "Here are your options:\n\n"
            "**OPTION_1:** `fix: handle empty diff`\n"
            "OPTION 2 - \"fix: guard against empty diff\"\n"
        )
        assert parse_numbered_output(content) == [
            "fix: handle empty diff",
            "fix: guard against empty diff",
        ]

    def test_orders_by_option_number(self):
        content = "OPTION_2: b\nOPTION_1: a\n"
        assert parse_numbered_output(content) == ["a", "b"]

    def test_drops_duplicates(self):
        content = "OPTION_1: feat: x\nOPTION_2: feat: x\nOPTION_3: feat: y\n"
        assert parse_numbered_output(content) == ["feat: x", "feat: y"]

    def test_no_options(self):
        assert parse_numbered_output("feat: add login") == []


class TestValidators:

    def test_validate_options(self):
        assert validate_options("OPTION_1: feat: add login") == (True, "")

    def test_validate_options_rejects_plain_text(self):
        ok, error = validate_options("feat: add login page")
        assert not ok
        assert "OPTION_1" in error

    def test_validate_options_rejects_short(self):
        assert validate_options("hi") == (False, "Response too short")

    def test_validate_not_empty(self):
        assert validate_not_empty("## Summary") == (True, "")
        assert validate_not_empty("   ")[0] is False

    def test_retry_prompt(self):
        assert retry_prompt("p", 0, "") == "p"
        assert "previous response was invalid (bad)" in retry_prompt("p", 1, "bad")


class TestOllamaClient:

    @pytest.fixture
    def client(self, monkeypatch):
        monkeypatch.setattr(OllamaClient, '_verify_connection', lambda self: None)
        return OllamaClient(model='llama3.2:3b')

    def test_retries_until_valid(self, client, monkeypatch):
        replies = iter([{'response': 'feat: no options here'}, {'response': 'OPTION_1: feat: ok', 'eval_count': 5}])
        prompts = []

        def call(prompt):
            prompts.append(prompt)
            return next(replies)

        monkeypatch.setattr(client, '_call_api', call)
        response = client.generate("prompt")

        assert response.content == 'OPTION_1: feat: ok'
        assert response.tokens_used == 5
        assert len(prompts) == 2
        assert 'IMPORTANT' in prompts[1]

    def test_gives_up_after_retries(self, client, monkeypatch):
        monkeypatch.setattr(client, '_call_api', lambda prompt: {'response': ''})
        with pytest.raises(LLMError, match='Failed after'):
            client.generate("prompt")

    def test_no_validator(self, client, monkeypatch):
        monkeypatch.setattr(client, '_call_api', lambda prompt: {'response': 'free text'})
        assert client.generate("prompt", validator=None).content == 'free text'

    def test_timeout_from_env(self, monkeypatch):
        monkeypatch.setattr(OllamaClient, '_verify_connection', lambda self: None)
        monkeypatch.setenv('GPA_TIMEOUT', '42')
        assert OllamaClient().timeout == 42


class TestClaudeClient:

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
        with pytest.raises(LLMError, match='ANTHROPIC_API_KEY'):
            ClaudeClient()

    def test_generate_reads_text_block(self, monkeypatch):
        client = ClaudeClient(api_key='test-key', model='claude-test')
        message = SimpleNamespace(
            content=[SimpleNamespace(type='text', text='  OPTION_1: docs: fix typo  ')],
            usage=SimpleNamespace(input_tokens=10, output_tokens=3),
        )
        calls = []

        def create(**kwargs):
            calls.append(kwargs)
            return message

        monkeypatch.setattr(client, '_client', SimpleNamespace(messages=SimpleNamespace(create=create)))
        response = client.generate("prompt")

        assert response.content == 'OPTION_1: docs: fix typo'
        assert response.tokens_used == 13
        assert calls[0]['model'] == 'claude-test'
        assert client.name == 'Claude (claude-test)'


class TestGetClient:

    def test_unknown(self):
        with pytest.raises(LLMError, match='Unknown LLM provider'):
            get_client('gpt')

    def test_auto_without_backends(self, monkeypatch):
        def unavailable(self):
            raise LLMError("Ollama not running")

        monkeypatch.setattr(OllamaClient, '_verify_connection', unavailable)
        monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
        with pytest.raises(LLMError, match='No LLM provider available'):
            get_client('auto')

    def test_auto_prefers_ollama(self, monkeypatch):
        monkeypatch.setattr(OllamaClient, '_verify_connection', lambda self: None)
        assert isinstance(get_client('auto'), OllamaClient)
