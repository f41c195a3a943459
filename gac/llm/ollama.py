"""Ollama LLM Client for Local Models"""

import os
import urllib.error
import urllib.request

from gac.llm.base import LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT, post_json, validate_candidates


class OllamaClient(LLMClient):
    """Ollama client for local models. Requires: ollama serve"""

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_TIMEOUT = 120
    MAX_RETRIES = 2

    def __init__(self, model: str | None = None, host: str | None = None):
        self.model = model or self.DEFAULT_MODEL
        self.host = (host or os.environ.get("OLLAMA_HOST", self.DEFAULT_HOST)).rstrip("/")
        self.timeout = int(os.environ.get("GAC_TIMEOUT", self.DEFAULT_TIMEOUT))
        self._verify_connection()

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def _verify_connection(self) -> None:
        """Check if Ollama is running and accessible."""
        try:
            with urllib.request.urlopen(f"{self.host}/api/tags", timeout=5):
                pass
        except (urllib.error.URLError, OSError):
            raise LLMError(f"Cannot connect to Ollama at {self.host}. Start with: ollama serve")

    def _call_api(self, prompt: str) -> dict:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "system": SYSTEM_PROMPT,
            "stream": False,
            "options": {"temperature": 0.7, "top_p": 0.9},
        }
        return post_json(
            "Ollama", f"{self.host}/api/generate", payload, timeout=self.timeout,
            status_hints={404: f"Model '{self.model}' not found. Run: ollama pull {self.model}"},
        )

    def generate(self, prompt: str) -> LLMResponse:
        """Call the generate API, re-asking when the output has no usable subjects."""
        last_error = ""
        for attempt in range(self.MAX_RETRIES + 1):
            retry_prompt = prompt
            if attempt > 0:
                retry_prompt = (f"{prompt}\n\nIMPORTANT: Your previous response was invalid ({last_error}). "
                                "Output only the three subject lines.")

            result = self._call_api(retry_prompt)
            content = result.get("response", "").strip()
            is_valid, last_error = validate_candidates(content)
            if is_valid:
                return LLMResponse(content=content, model=self.model, tokens_used=result.get("eval_count", 0))

        raise LLMError(f"Ollama gave no usable subjects after {self.MAX_RETRIES} retries: {last_error}")
