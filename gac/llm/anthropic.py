"""Anthropic (Claude) LLM Client"""

import os

from gac.llm.base import LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT, validate_candidates


class AnthropicClient(LLMClient):
    """Claude API client via the official SDK. Requires ANTHROPIC_API_KEY."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 300
    TEMPERATURE = 0.7
    MAX_RETRIES = 1

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.model = model if model and model.startswith("claude") else self.DEFAULT_MODEL

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

    def generate(self, prompt: str) -> LLMResponse:
        from anthropic import APIError, AuthenticationError

        last_error = ""
        for attempt in range(self.MAX_RETRIES + 1):
            try:
                retry_prompt = prompt
                if attempt > 0:
                    retry_prompt = f"{prompt}\n\nIMPORTANT: Your previous response was invalid ({last_error}). Output only the three subject lines."

                response = self._client.messages.create(
                    model=self.model,
                    max_tokens=self.MAX_TOKENS,
                    temperature=self.TEMPERATURE,
                    system=SYSTEM_PROMPT,
                    messages=[{"role": "user", "content": retry_prompt}]
                )

                content = "\n".join(
                    block.text.strip() for block in response.content if block.type == "text"
                )

                is_valid, error = validate_candidates(content)
                if not is_valid:
                    last_error = error
                    continue

                return LLMResponse(
                    content=content,
                    model=self.model,
                    tokens_used=response.usage.input_tokens + response.usage.output_tokens
                )

            except AuthenticationError:
                raise LLMError("Invalid API key. Check your ANTHROPIC_API_KEY.")
            except APIError as e:
                raise LLMError(f"Claude API error: {e.message}")

        raise LLMError(f"Claude gave no usable subjects after {self.MAX_RETRIES} retries: {last_error}")
