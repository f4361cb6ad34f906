"""Ollama LLM Client for Local Models"""

import os
import json
import http.client
import socket
import urllib.request
import urllib.error
from typing import Optional

from git_pr_ai.llm.base import LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT, Validator, retry_prompt, validate_options


class OllamaClient(LLMClient):
    """Ollama client for local models. Requires: ollama serve"""

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_TIMEOUT = 300  # 5 minutes for CPU inference
    MAX_RETRIES = 2

    def __init__(self, model: str | None = None, host: str | None = None):
        self.model = model or self.DEFAULT_MODEL
        self.host = host or os.environ.get("OLLAMA_HOST", self.DEFAULT_HOST)
        self.timeout = int(os.environ.get("GPA_TIMEOUT", self.DEFAULT_TIMEOUT))
        self._verify_connection()

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def _verify_connection(self) -> None:
        """Check if Ollama is running and accessible."""
        try:
            req = urllib.request.Request(f"{self.host}/api/tags")
            with urllib.request.urlopen(req, timeout=5):
                pass
        except urllib.error.URLError:
            raise LLMError("Ollama not running. Start with: ollama serve")

    def _call_api(self, prompt: str) -> dict:
        """Make a single API call to Ollama."""
        url = f"{self.host}/api/generate"
        payload = {
            "model": self.model,
            "prompt": prompt,
            "system": SYSTEM_PROMPT,
            "stream": False,
            "keep_alive": "10m",
            "options": {
                "temperature": 0.4,
                "num_predict": 2000,
            }
        }

        data = json.dumps(payload).encode('utf-8')
        req = urllib.request.Request(url, data=data, headers={"Content-Type": "application/json"})

        with urllib.request.urlopen(req, timeout=self.timeout) as response:
            return json.loads(response.read().decode('utf-8'))

    def generate(self, prompt: str, validator: Optional[Validator] = validate_options) -> LLMResponse:
        """Call Ollama's generate API, retrying when the output fails validation."""
        last_error = ""

        for attempt in range(self.MAX_RETRIES + 1):
            try:
                result = self._call_api(retry_prompt(prompt, attempt, last_error))
            except urllib.error.HTTPError as e:
                if e.code == 404:
                    raise LLMError(f"Model '{self.model}' not found. Run: ollama pull {self.model}")
                raise LLMError(f"Ollama error ({e.code}): {e.reason}")
            except urllib.error.URLError as e:
                if isinstance(e.reason, socket.timeout):
                    raise LLMError(f"Request timed out after {self.timeout}s. Increase timeout: set GPA_TIMEOUT=600")
                if "Connection refused" in str(e):
                    raise LLMError("Ollama not running. Start with: ollama serve")
                raise LLMError(f"Ollama request failed: {e}")
            except socket.timeout:
                raise LLMError(f"Request timed out after {self.timeout}s. Increase timeout: set GPA_TIMEOUT=600")
            except json.JSONDecodeError:
                raise LLMError("Invalid response from Ollama. Try a different model or a smaller change.")
            except http.client.HTTPException as e:
                raise LLMError(f"Incomplete response from Ollama: {e}. The model may have run out of memory.")
            except OSError as e:
                raise LLMError(f"Connection to Ollama lost: {e}. Check that 'ollama serve' is still running.")

            content = result.get("response", "").strip()
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
                tokens_used=result.get("eval_count", 0)
            )

        raise LLMError(f"Failed after {self.MAX_RETRIES} retries: {last_error}")
