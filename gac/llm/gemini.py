"""Gemini LLM Client (generateContent over HTTPS)"""

import os
from urllib.parse import quote

from gac.llm.base import LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT, post_json, remote_model


class GeminiClient(LLMClient):
    """Google Gemini client. Requires GEMINI_API_KEY or GOOGLE_API_KEY."""

    DEFAULT_MODEL = "gemini-1.5-flash"
    API_ROOT = "https://generativelanguage.googleapis.com/v1beta/models"
    TEMPERATURE = 0.7
    TOP_P = 0.9
    TIMEOUT = 60

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
        self.model = remote_model(model, self.DEFAULT_MODEL)

        if not self.api_key:
            raise LLMError("GEMINI_API_KEY or GOOGLE_API_KEY not found. Set it or use --engine ollama|none")

    @property
    def name(self) -> str:
        return f"Gemini ({self.model})"

    @property
    def endpoint(self) -> str:
        return f"{self.API_ROOT}/{quote(self.model, safe='')}:generateContent?key={quote(self.api_key, safe='')}"

    @staticmethod
    def _extract_text(data: dict) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        first = candidates[0] or {}
        parts = (first.get("content") or {}).get("parts")
        if isinstance(parts, list):
            return "\n".join(p.get("text", "") for p in parts if p.get("text"))
        return first.get("output_text", "")

    def generate(self, prompt: str) -> LLMResponse:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "generationConfig": {"temperature": self.TEMPERATURE, "topP": self.TOP_P},
        }
        data = post_json("Gemini", self.endpoint, payload, timeout=self.TIMEOUT)

        content = self._extract_text(data).strip()
        if not content:
            raise LLMError("Empty response from Gemini")

        usage = data.get("usageMetadata") or {}
        response = LLMResponse(content=content, model=self.model, tokens_used=usage.get("totalTokenCount", 0))
        if not response.candidates:
            raise LLMError("Gemini response format unexpected")
        return response
