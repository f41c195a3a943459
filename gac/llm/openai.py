"""OpenAI LLM Client (chat completions over HTTPS)"""

import os

from gac.llm.base import LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT, post_json, remote_model


class OpenAIClient(LLMClient):
    """OpenAI chat completions client. Requires OPENAI_API_KEY."""

    DEFAULT_MODEL = "gpt-4o-mini"
    API_URL = "https://api.openai.com/v1/chat/completions"
    TEMPERATURE = 0.7
    TOP_P = 0.9
    TIMEOUT = 60

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self.model = remote_model(model, self.DEFAULT_MODEL)

        if not self.api_key:
            raise LLMError(
                "OPENAI_API_KEY not found. Set it or use --engine ollama|none:\n"
                "  export OPENAI_API_KEY='your-key-here'"
            )

    @property
    def name(self) -> str:
        return f"OpenAI ({self.model})"

    def generate(self, prompt: str) -> LLMResponse:
        payload = {
            "model": self.model,
            "temperature": self.TEMPERATURE,
            "top_p": self.TOP_P,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        data = post_json("OpenAI", self.API_URL, payload,
                         headers={"Authorization": f"Bearer {self.api_key}"}, timeout=self.TIMEOUT)

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            content = ""
        if not content.strip():
            raise LLMError("Empty response from OpenAI")

        usage = data.get("usage") or {}
        response = LLMResponse(content=content.strip(), model=self.model, tokens_used=usage.get("total_tokens", 0))
        if not response.candidates:
            raise LLMError("OpenAI response format unexpected: no commit subjects found")
        return response
